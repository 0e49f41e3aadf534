import redis

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.config import LedgerSettings
from DV_Ledger.dv_shared.log import get_logger
from DV_Ledger.dv_core import validation

LOG = get_logger("height")


class ChainHeight:
    """Process-wide logical clock, writable only by the configured system owner."""

    def __init__(self, client: redis.Redis, settings: LedgerSettings):
        self.db: redis.Redis = client
        self.settings = settings

    def _read_height(self, conn) -> int:
        raw = conn.get(config.HEIGHT_KEY)
        return int(raw) if raw is not None else 0

    def is_system_owner(self, caller: str) -> bool:
        return self.settings.system_owner is not None and caller == self.settings.system_owner

    def get_chain_height(self) -> int:
        try:
            return self._read_height(self.db)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("get_chain_height")

    def update_chain_height(self, caller: str, new_height: int) -> bool:
        if not self.is_system_owner(caller):
            raise errors.AccessDeniedError(caller, "update the chain height")
        validation.validate_height(new_height, self.settings.max_chain_height)

        try:
            previous = self.db.getset(config.HEIGHT_KEY, new_height)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("update_chain_height")

        # Rewinds are permitted; flag them so operators can see timestamps moving back
        if previous is not None and int(previous) > new_height:
            LOG.warning("height_rewound", previous=int(previous), height=new_height)
        LOG.info("height_updated", height=new_height)
        return True
