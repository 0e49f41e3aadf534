class LedgerError(Exception):
    code: int = 0

    def __init__(self , message):
        super().__init__(message)


class AccessDeniedError(LedgerError):
    code = 401

    def __init__(self , caller , action):
        self.caller = caller
        self.action = action
        message = f"Caller {caller} is not allowed to {action}"
        super().__init__(message)


class AlreadyExistsError(LedgerError):
    code = 409

    def __init__(self , account):
        self.account = account
        message = f"Vault for {account} already exists"
        super().__init__(message)


class NotFoundError(LedgerError):
    code = 404

    def __init__(self , account):
        self.account = account
        message = f"Vault for {account} not found"
        super().__init__(message)


class InvalidPriceError(LedgerError):
    code = 400

    def __init__(self , fee , min_fee , max_fee):
        self.fee = fee
        self.min_fee = min_fee
        self.max_fee = max_fee
        message = f"Invalid price {fee}: must be within [{min_fee}, {max_fee}]"
        super().__init__(message)


class InvalidInputError(LedgerError):
    code = 422

    def __init__(self , field , reason):
        self.field = field
        self.reason = reason
        message = f"Invalid {field}: {reason}"
        super().__init__(message)


class RecordNotFoundError(LedgerError):
    code = 403

    def __init__(self , owner , index):
        self.owner = owner
        self.index = index
        message = f"Record {owner}/{index} not found"
        super().__init__(message)


class HostEnvironmentError(Exception):
    pass

class InsufficientFundsError(HostEnvironmentError):
    code = 1

    def __init__(self, account, balance, amount):
        self.account = account
        self.balance = balance
        self.amount = amount
        message = f"Insufficient funds for {account}: balance {balance} < {amount}"
        super().__init__(message)

class LedgerUnavailableError(HostEnvironmentError):
    def __init__(self , message):
        message = f"Ledger_error  = {message}"
        super().__init__(message)

class ConcurrencyError(HostEnvironmentError):
    def __init__(self, operation):
        self.operation = operation
        message = f"Optimistic lock failed after max retries: {operation}"
        super().__init__(message)
