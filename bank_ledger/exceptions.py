"""Exception hierarchy for the bank ledger."""

from typing import Optional


class LedgerError(Exception):
    """Base exception for all ledger errors."""


class ValidationError(LedgerError, ValueError):
    """Raised when an input violates a business rule (age, amounts, field contents)."""


class InsufficientFundsError(ValidationError):
    """Raised when a withdrawal is larger than the available balance."""


class AuthError(LedgerError):
    """Raised on an unknown customer id or a wrong password."""


class LimitExceededError(LedgerError):
    """Raised when a withdrawal would push the day's total over the daily limit."""

    def __init__(self, message: str, limit=None, daily_total=None, amount=None):
        super().__init__(message)
        self.limit = limit
        self.daily_total = daily_total
        self.amount = amount


class ParseError(LedgerError, ValueError):
    """Raised when a persisted customer line cannot be decoded."""

    def __init__(self, message: str, line: str = "", line_number: Optional[int] = None):
        super().__init__(message)
        self.line = line
        self.line_number = line_number

    def __str__(self) -> str:
        message = super().__str__()
        if self.line_number is not None:
            return f"line {self.line_number}: {message}"
        return message


class StorageError(LedgerError):
    """Raised when the customer file cannot be read or written."""
