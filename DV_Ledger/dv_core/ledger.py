"""
DataVaultLedger: the public operation surface of the vault state machine.

Wires the height counter, balance store, vault registry, record store and
access ledger over a single Redis client and one immutable LedgerSettings.
Every mutating method takes the authenticated caller as its first argument.
"""

from typing import Optional

import redis

from DV_Ledger.dv_shared.config import LedgerSettings, load_settings
from DV_Ledger.dv_shared.types import (
    EncryptedRecord,
    HealthStatus,
    Interaction,
    LedgerStats,
    OwnerSummary,
    VaultInfo,
)
from DV_Ledger.dv_core import connection
from DV_Ledger.dv_core.access import AccessLedger
from DV_Ledger.dv_core.balances import BalanceLedger
from DV_Ledger.dv_core.height import ChainHeight
from DV_Ledger.dv_core.records import RecordStore
from DV_Ledger.dv_core.registry import VaultRegistry
from DV_Ledger.dv_core.stats import LedgerReporter


class DataVaultLedger:
    def __init__(self, client: redis.Redis, settings: Optional[LedgerSettings] = None):
        self.db = client
        self.settings = settings if settings is not None else load_settings()

        self.height = ChainHeight(client, self.settings)
        self.balances = BalanceLedger(client, self.settings, self.height)
        self.registry = VaultRegistry(client, self.settings, self.height)
        self.records = RecordStore(client, self.settings, self.registry)
        self.access = AccessLedger(
            client, self.settings, self.registry, self.records, self.balances, self.height
        )
        self.reporter = LedgerReporter(client, self.registry, self.records, self.balances)

    # ─── Admin ───

    def update_chain_height(self, caller: str, new_height: int) -> bool:
        return self.height.update_chain_height(caller, new_height)

    def get_chain_height(self) -> int:
        return self.height.get_chain_height()

    def mint(self, caller: str, account: str, amount: int) -> int:
        return self.balances.mint(caller, account, amount)

    # ─── Vault Registry ───

    def create_storage(self, caller: str, fee: int) -> bool:
        return self.registry.create_storage(caller, fee)

    def update_access_fee(self, caller: str, new_fee: int) -> bool:
        return self.registry.update_access_fee(caller, new_fee)

    def get_storage_info(self, account: str) -> Optional[VaultInfo]:
        return self.registry.get_storage_info(account)

    # ─── Record Store ───

    def store_encrypted_data(self, caller: str, content_hash: str, encrypted_blob: bytes,
                             category_tag: str, proof_signature: str) -> int:
        return self.records.store_encrypted_data(
            caller, content_hash, encrypted_blob, category_tag, proof_signature
        )

    def toggle_data_visibility(self, caller: str, index: int) -> bool:
        return self.records.toggle_data_visibility(caller, index)

    def get_encrypted_record(self, owner: str, index: int) -> Optional[EncryptedRecord]:
        return self.records.get_encrypted_record(owner, index)

    def list_records(self, owner: str) -> list[tuple[int, EncryptedRecord]]:
        return self.records.list_records(owner)

    # ─── Access Ledger ───

    def request_data_access(self, caller: str, owner: str, index: int, reason: str) -> bool:
        return self.access.request_data_access(caller, owner, index, reason)

    def get_interaction_log(self, owner: str, requester: str, index: int) -> Optional[Interaction]:
        return self.access.get_interaction_log(owner, requester, index)

    # ─── Balances ───

    def get_balance(self, account: str) -> int:
        return self.balances.get_balance(account)

    def transfer(self, caller: str, recipient: str, amount: int) -> bool:
        return self.balances.transfer(caller, recipient, amount)

    # ─── Reporting ───

    def get_stats(self) -> LedgerStats:
        return self.reporter.get_stats()

    def get_owner_summary(self, owner: str) -> Optional[OwnerSummary]:
        return self.reporter.get_owner_summary(owner)

    def health(self) -> HealthStatus:
        return connection.health_check(self.db)
