from typing import Optional

import redis

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.config import LedgerSettings
from DV_Ledger.dv_shared.log import get_logger
from DV_Ledger.dv_shared.types import VaultInfo
from DV_Ledger.dv_core import validation
from DV_Ledger.dv_core.height import ChainHeight
from DV_Ledger.dv_core.transaction import run_transaction

LOG = get_logger("registry")


class VaultRegistry:
    def __init__(self, client: redis.Redis, settings: LedgerSettings, height: ChainHeight):
        self.db: redis.Redis = client
        self.settings = settings
        self.height = height

    def _vault_key(self, owner: str) -> str:
        return f"{config.VAULT_KEY_PREFIX}:{owner}"

    def _validate_fee(self, fee: int) -> None:
        validation.validate_fee(fee, self.settings.min_fee, self.settings.max_fee)

    def _serialize_vault(self, vault: VaultInfo) -> dict:
        return {
            "creation_height": str(vault.creation_height),
            "total_entries": str(vault.total_entries),
            "access_price": str(vault.access_price),
        }

    def _deserialize_vault(self, data: dict[bytes, bytes]) -> VaultInfo:
        return VaultInfo(
            creation_height=int(data[b"creation_height"]),
            total_entries=int(data[b"total_entries"]),
            access_price=int(data[b"access_price"]),
        )

    def _read_vault(self, conn, owner: str) -> Optional[VaultInfo]:
        data = conn.hgetall(self._vault_key(owner))
        if not data:
            return None
        return self._deserialize_vault(data)

    def _require_vault(self, conn, owner: str) -> VaultInfo:
        vault = self._read_vault(conn, owner)
        if vault is None:
            raise errors.NotFoundError(owner)
        return vault

    # ─── Write Operations ───

    def create_storage(self, caller: str, fee: int) -> bool:
        validation.validate_account(caller)
        vault_key = self._vault_key(caller)

        def body(pipe) -> VaultInfo:
            if pipe.exists(vault_key):
                raise errors.AlreadyExistsError(caller)
            self._validate_fee(fee)

            vault = VaultInfo(
                creation_height=self.height._read_height(pipe),
                total_entries=0,
                access_price=fee,
            )
            pipe.multi()
            pipe.hset(vault_key, mapping=self._serialize_vault(vault))
            pipe.hincrby(config.LEDGER_STATS_KEY, "vaults_created", 1)
            return vault

        vault = run_transaction(self.db, "create_storage", body, vault_key, config.HEIGHT_KEY)
        LOG.info("vault_created", owner=caller, fee=fee, height=vault.creation_height)
        return True

    def update_access_fee(self, caller: str, new_fee: int) -> bool:
        validation.validate_account(caller)
        vault_key = self._vault_key(caller)

        def body(pipe) -> int:
            vault = self._require_vault(pipe, caller)
            self._validate_fee(new_fee)

            pipe.multi()
            pipe.hset(vault_key, "access_price", str(new_fee))
            return vault.access_price

        old_fee = run_transaction(self.db, "update_access_fee", body, vault_key)
        LOG.info("fee_updated", owner=caller, old_fee=old_fee, fee=new_fee)
        return True

    # ─── Query Operations ───

    def get_storage_info(self, account: str) -> Optional[VaultInfo]:
        try:
            return self._read_vault(self.db, account)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("get_storage_info")
