"""
Optimistic Redis transactions for ledger state transitions.

Every mutating ledger operation follows the same shape:

    WATCH the keys it reads
    read + validate (raising a LedgerError aborts with nothing written)
    MULTI, queue every write, EXEC

If another client touches a watched key between WATCH and EXEC, redis-py
raises WatchError and the whole body is replayed against fresh state.
"""

from typing import Callable, TypeVar

import redis

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.log import get_logger

LOG = get_logger("transaction")

T = TypeVar("T")


def run_transaction(
    client: redis.Redis,
    operation: str,
    body: Callable[[redis.client.Pipeline], T],
    *watch_keys: str,
) -> T:
    """Run ``body`` inside WATCH/MULTI/EXEC over ``watch_keys``.

    ``body`` receives the pipeline in immediate mode, performs its reads,
    calls ``pipe.multi()`` and queues its writes. Its return value is handed
    back once EXEC succeeds.
    """
    try:
        for attempt in range(config.OPTIMISTIC_LOCK_RETRIES):
            with client.pipeline(transaction=True) as pipe:
                try:
                    pipe.watch(*watch_keys)
                    result = body(pipe)
                    pipe.execute()
                    return result
                except redis.WatchError:
                    LOG.debug("watch_conflict", operation=operation, attempt=attempt)
                    continue

        raise errors.ConcurrencyError(operation)
    except redis.exceptions.ConnectionError:
        raise errors.LedgerUnavailableError(operation)
