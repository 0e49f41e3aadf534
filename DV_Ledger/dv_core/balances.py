"""
Native-unit balances: the host ledger's value-transfer primitive.

The Access Ledger never moves value on its own; it asks this store to
verify funds while its keys are WATCHed and to queue the debit/credit
inside the same MULTI block as the interaction write.
"""

import redis

from DV_Ledger.dv_shared import config, errors
from DV_Ledger.dv_shared.config import LedgerSettings
from DV_Ledger.dv_shared.log import get_logger
from DV_Ledger.dv_core import validation
from DV_Ledger.dv_core.height import ChainHeight
from DV_Ledger.dv_core.transaction import run_transaction

LOG = get_logger("balances")


class BalanceLedger:
    def __init__(self, client: redis.Redis, settings: LedgerSettings, height: ChainHeight):
        self.db: redis.Redis = client
        self.settings = settings
        self.height = height

    def _balance_key(self, account: str) -> str:
        return f"{config.BALANCE_KEY_PREFIX}:{account}"

    def _read_balance(self, conn, account: str) -> int:
        raw = conn.get(self._balance_key(account))
        return int(raw) if raw is not None else 0

    # ─── Transfer primitive (used inside other transactions) ───

    def check_funds(self, pipe, account: str, amount: int) -> int:
        """Fail with InsufficientFundsError unless ``account`` can pay ``amount``.

        Must run before ``pipe.multi()`` with the balance key watched.
        """
        balance = self._read_balance(pipe, account)
        if balance < amount:
            LOG.warning("transfer_rejected", account=account, balance=balance, amount=amount)
            raise errors.InsufficientFundsError(account, balance, amount)
        return balance

    def queue_transfer(self, pipe, amount: int, sender: str, recipient: str) -> None:
        pipe.decrby(self._balance_key(sender), amount)
        pipe.incrby(self._balance_key(recipient), amount)

    # ─── Standalone operations ───

    def get_balance(self, account: str) -> int:
        try:
            return self._read_balance(self.db, account)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("get_balance")

    def mint(self, caller: str, account: str, amount: int) -> int:
        if not self.height.is_system_owner(caller):
            raise errors.AccessDeniedError(caller, "mint balances")
        validation.validate_account(account, "account")
        validation.validate_amount(amount)

        try:
            balance = self.db.incrby(self._balance_key(account), amount)
        except redis.exceptions.ConnectionError:
            raise errors.LedgerUnavailableError("mint")

        LOG.info("balance_minted", account=account, amount=amount, balance=balance)
        return balance

    def transfer(self, sender: str, recipient: str, amount: int) -> bool:
        validation.validate_account(sender)
        validation.validate_account(recipient, "recipient")
        validation.validate_amount(amount)
        if sender == recipient:
            raise errors.InvalidInputError("recipient", "cannot transfer to self")

        def body(pipe):
            self.check_funds(pipe, sender, amount)
            pipe.multi()
            self.queue_transfer(pipe, amount, sender, recipient)

        run_transaction(self.db, "transfer", body, self._balance_key(sender))
        LOG.info("balance_transferred", sender=sender, recipient=recipient, amount=amount)
        return True
