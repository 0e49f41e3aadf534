import redis

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.log import get_logger
from DV_Ledger.dv_shared.types import HealthStatus

LOG = get_logger("connection")


def create_ledger_client(host: str = config.REDIS_HOST, port: int = config.REDIS_PORT) -> redis.Redis:
    r = redis.Redis(
        host=host,
        port=port,
        db=config.REDIS_LEDGER_DB,
        decode_responses=False,
        socket_connect_timeout=config.REDIS_SOCKET_TIMEOUT,
        socket_timeout=config.REDIS_SOCKET_TIMEOUT,
    )
    try:
        r.ping()
    except redis.exceptions.ConnectionError:
        raise errors.LedgerUnavailableError(f"Cannot connect to Redis at {host}:{port}")
    LOG.info("ledger_connected", host=host, port=port)
    return r


def health_check(client: redis.Redis) -> HealthStatus:
    connected = False
    key_count = 0
    height = 0

    try:
        connected = bool(client.ping())
        key_count = client.dbsize()
        raw = client.get(config.HEIGHT_KEY)
        height = int(raw) if raw is not None else 0
    except redis.exceptions.ConnectionError:
        LOG.warning("ledger_health_degraded")

    return HealthStatus(
        ledger_connected=connected,
        ledger_key_count=key_count,
        chain_height=height,
    )


def close_client(client: redis.Redis) -> None:
    client.close()
    LOG.info("ledger_disconnected")
