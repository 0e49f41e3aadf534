from typing import Optional

import redis

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.types import LedgerStats, OwnerSummary
from DV_Ledger.dv_core.balances import BalanceLedger
from DV_Ledger.dv_core.records import RecordStore
from DV_Ledger.dv_core.registry import VaultRegistry


class LedgerReporter:
    def __init__(self, client: redis.Redis, registry: VaultRegistry, records: RecordStore,
                 balances: BalanceLedger):
        self.db = client
        self.registry = registry
        self.records = records
        self.balances = balances

    def get_stats(self) -> LedgerStats:
        try:
            stats = self.db.hgetall(config.LEDGER_STATS_KEY)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("get_stats")

        return LedgerStats(**{
            field: int(stats.get(field.encode(), 0))
            for field in config.STATS_FIELDS
        })

    def get_owner_summary(self, owner: str) -> Optional[OwnerSummary]:
        vault = self.registry.get_storage_info(owner)
        if vault is None:
            return None

        records = self.records.list_records(owner)
        return OwnerSummary(
            owner=owner,
            total_entries=vault.total_entries,
            accessible_entries=sum(1 for _, record in records if record.is_accessible),
            access_price=vault.access_price,
            balance=self.balances.get_balance(owner),
        )
