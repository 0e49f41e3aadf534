from typing import Optional

import redis

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.config import LedgerSettings
from DV_Ledger.dv_shared.log import get_logger
from DV_Ledger.dv_shared.types import Interaction
from DV_Ledger.dv_core import validation
from DV_Ledger.dv_core.balances import BalanceLedger
from DV_Ledger.dv_core.height import ChainHeight
from DV_Ledger.dv_core.records import RecordStore
from DV_Ledger.dv_core.registry import VaultRegistry
from DV_Ledger.dv_core.transaction import run_transaction

LOG = get_logger("access")


class AccessLedger:
    """Paid access requests against another account's records.

    One interaction is kept per (owner, requester, index); a repeated request
    overwrites it. The interaction write and the payment are committed in the
    same EXEC, so a rejected payment leaves the log untouched.
    """

    def __init__(
        self,
        client: redis.Redis,
        settings: LedgerSettings,
        registry: VaultRegistry,
        records: RecordStore,
        balances: BalanceLedger,
        height: ChainHeight,
    ):
        self.db: redis.Redis = client
        self.settings = settings
        self.registry = registry
        self.records = records
        self.balances = balances
        self.height = height

    def _interaction_key(self, owner: str, requester: str, index: int) -> str:
        return f"{config.INTERACTION_KEY_PREFIX}:{owner}:{requester}:{index}"

    def _serialize_interaction(self, interaction: Interaction) -> dict:
        return {
            "timestamp": str(interaction.timestamp),
            "request_reason": interaction.request_reason,
            "payment_amount": str(interaction.payment_amount),
        }

    def _deserialize_interaction(self, data: dict[bytes, bytes]) -> Interaction:
        return Interaction(
            timestamp=int(data[b"timestamp"]),
            request_reason=data[b"request_reason"].decode(),
            payment_amount=int(data[b"payment_amount"]),
        )

    # ─── Write Operations ───

    def request_data_access(self, caller: str, owner: str, index: int, reason: str) -> bool:
        validation.validate_account(caller)
        if owner == caller:
            raise errors.InvalidInputError("owner", "cannot request access to your own vault")
        if not validation.is_storable_text(owner):
            # No vault can be registered under such a name
            raise errors.NotFoundError(owner)

        vault_key = self.registry._vault_key(owner)
        record_key = self.records._record_key(owner, index)
        balance_key = self.balances._balance_key(caller)

        def body(pipe) -> Interaction:
            vault = self.registry._require_vault(pipe, owner)
            validation.validate_index(index)
            validation.validate_bounded_text("request_reason", reason, config.MAX_REASON_LENGTH)

            if index > vault.total_entries:
                raise errors.RecordNotFoundError(owner, index)
            # Record and vault are written by different operations; never assume they agree
            record = self.records._read_record(pipe, owner, index)
            if record is None:
                raise errors.RecordNotFoundError(owner, index)
            if not record.is_accessible:
                raise errors.AccessDeniedError(caller, f"access record {owner}/{index}")

            cost = vault.access_price
            self.balances.check_funds(pipe, caller, cost)
            interaction = Interaction(
                timestamp=self.height._read_height(pipe),
                request_reason=reason,
                payment_amount=cost,
            )

            pipe.multi()
            pipe.hset(
                self._interaction_key(owner, caller, index),
                mapping=self._serialize_interaction(interaction),
            )
            self.balances.queue_transfer(pipe, cost, caller, owner)
            pipe.hincrby(config.LEDGER_STATS_KEY, "access_requests", 1)
            pipe.hincrby(config.LEDGER_STATS_KEY, "total_paid", cost)
            return interaction

        interaction = run_transaction(
            self.db,
            "request_data_access",
            body,
            vault_key,
            record_key,
            balance_key,
            config.HEIGHT_KEY,
        )
        LOG.info(
            "access_granted",
            owner=owner,
            requester=caller,
            index=index,
            paid=interaction.payment_amount,
            timestamp=interaction.timestamp,
        )
        return True

    # ─── Query Operations ───

    def get_interaction_log(self, owner: str, requester: str, index: int) -> Optional[Interaction]:
        try:
            data = self.db.hgetall(self._interaction_key(owner, requester, index))
            if not data:
                return None
            return self._deserialize_interaction(data)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("get_interaction_log")
