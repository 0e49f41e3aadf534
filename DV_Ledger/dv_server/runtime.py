from typing import Optional

from DV_Ledger.dv_shared import config
from DV_Ledger.dv_shared.config import LedgerSettings, load_settings
from DV_Ledger.dv_shared.errors import LedgerUnavailableError
from DV_Ledger.dv_shared.log import configure_logging
from DV_Ledger.dv_core import connection
from DV_Ledger.dv_core.ledger import DataVaultLedger

ledger: Optional[DataVaultLedger] = None


def start(settings: Optional[LedgerSettings] = None) -> DataVaultLedger:
    global ledger
    if ledger is not None:
        return ledger

    if settings is None:
        settings = load_settings()
    configure_logging(debug=settings.debug)

    client = connection.create_ledger_client(config.REDIS_HOST, config.REDIS_PORT)
    ledger = DataVaultLedger(client, settings)
    return ledger


def get_ledger() -> DataVaultLedger:
    if ledger is None:
        raise LedgerUnavailableError("Ledger not initialized. Call start() first.")
    return ledger


def stop() -> None:
    global ledger
    if ledger is None:
        return
    try:
        connection.close_client(ledger.db)
    finally:
        ledger = None
