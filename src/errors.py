from typing import Optional


class LedgerError(Exception):
    """Base exception for every rejected ledger input."""
    pass


class MalformedRecord(LedgerError):
    """Raised when an input row cannot be turned into a transaction."""

    def __init__(self, message: str, line_number: Optional[int] = None):
        self.line_number = line_number
        if line_number is not None:
            message = f"line {line_number}: {message}"
        super().__init__(message)


class DuplicateTransaction(LedgerError):
    """Raised when a transaction id has already been recorded."""
    pass


class TransactionNotFound(LedgerError):
    """Raised when a dispute action references an unknown transaction id."""
    pass


class ClientMismatch(LedgerError):
    """Raised when a dispute action names a client that does not own the transaction."""
    pass


class InvalidDisputeState(LedgerError):
    """Raised when a dispute action does not fit the transaction's current dispute state."""
    pass


class AccountNotFound(LedgerError):
    """Raised when an operation requires an account that was never created."""
    pass


class AccountLocked(LedgerError):
    """Raised when the balance of a frozen account would change."""
    pass


class InsufficientFunds(LedgerError):
    """Raised when a withdrawal would take available funds below zero."""
    pass


class NegativeAccountCreation(LedgerError):
    """Raised when the first balance change for a client is negative."""
    pass


class NegativeAmount(LedgerError):
    """Raised when a hold, release or charge-back is asked for a negative amount."""
    pass


class AmountOutOfRange(LedgerError):
    """Raised when an amount is too large or too precise for exact ledger arithmetic."""
    pass
