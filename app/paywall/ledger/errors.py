class LedgerError(Exception):
    pass


class LedgerValidationError(LedgerError):
    pass


class InsufficientBalanceError(LedgerError):
    pass


class DepositLimitExceededError(LedgerValidationError):
    pass


class LedgerIdempotencyConflictError(LedgerError):
    pass
