import os
from dataclasses import dataclass
from typing import Optional

# Redis Connection

REDIS_HOST              = os.environ.get("DV_REDIS_HOST", "localhost")
REDIS_PORT              = int(os.environ.get("DV_REDIS_PORT", "6379"))
REDIS_LEDGER_DB         = 0
REDIS_SOCKET_TIMEOUT    = 5          # seconds

# Key Namespace Prefixes

HEIGHT_KEY              = "dv:v1:height"
VAULT_KEY_PREFIX        = "dv:v1:vault"          # dv:v1:vault:{owner}
RECORD_KEY_PREFIX       = "dv:v1:rec"            # dv:v1:rec:{owner}:{index}
INTERACTION_KEY_PREFIX  = "dv:v1:ix"             # dv:v1:ix:{owner}:{requester}:{index}
BALANCE_KEY_PREFIX      = "dv:v1:bal"            # dv:v1:bal:{account}
LEDGER_STATS_KEY        = "dv:v1:stats"

KEY_SEPARATOR           = ":"

# Pricing (native ledger units)

MIN_FEE                 = 1
MAX_FEE                 = 1_000_000_000_000

# Logical Clock

MAX_CHAIN_HEIGHT        = 4_294_967_295

# Record Field Bounds

CONTENT_HASH_LENGTH     = 64
PROOF_SIGNATURE_LENGTH  = 64
MAX_BLOB_BYTES          = 256
MAX_TAG_LENGTH          = 32
MAX_REASON_LENGTH       = 64

# Transactions

OPTIMISTIC_LOCK_RETRIES = 3

# Stats Counters

STATS_FIELDS = ("vaults_created", "records_stored", "access_requests", "total_paid")


@dataclass(frozen=True)
class LedgerSettings:
    """Immutable per-process ledger configuration."""
    system_owner:     Optional[str] = None
    min_fee:          int = MIN_FEE
    max_fee:          int = MAX_FEE
    max_chain_height: int = MAX_CHAIN_HEIGHT
    debug:            bool = False

    def __post_init__(self):
        if self.min_fee < 0 or self.max_fee < self.min_fee:
            raise ValueError(f"Invalid fee bounds [{self.min_fee}, {self.max_fee}]")
        if self.max_chain_height <= 0:
            raise ValueError(f"Invalid height ceiling {self.max_chain_height}")


def load_settings() -> LedgerSettings:
    """Build settings from DV_* environment variables, falling back to the constants above."""
    return LedgerSettings(
        system_owner=os.environ.get("DV_SYSTEM_OWNER") or None,
        min_fee=int(os.environ.get("DV_MIN_FEE", MIN_FEE)),
        max_fee=int(os.environ.get("DV_MAX_FEE", MAX_FEE)),
        max_chain_height=int(os.environ.get("DV_MAX_CHAIN_HEIGHT", MAX_CHAIN_HEIGHT)),
        debug=os.environ.get("DV_DEBUG", "").lower() in ("1", "true", "yes"),
    )
