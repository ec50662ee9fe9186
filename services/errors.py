"""
services/errors.py
------------------
Domain exceptions raised inside the service layer.

Each carries a message that is safe to show to the user. Services turn
them into ``{"success": False, "message": ...}`` results, so they never
reach the handlers.
"""


class LedgerError(Exception):
    """Base class for expected, user-facing failures."""

    default_message = "Something went wrong."

    def __init__(self, message: str | None = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class SessionInvalidError(LedgerError):
    default_message = "Your session is invalid or has expired. Send /start to sign in again."


class NotFoundError(LedgerError):
    default_message = "The requested record was not found."


class PeriodNotFoundError(NotFoundError):
    default_message = "Budget period not found."


class TransactionNotFoundError(NotFoundError):
    default_message = "Transaction not found."


class WalletNotFoundError(NotFoundError):
    default_message = "One or both wallets were not found."


class ValidationError(LedgerError):
    default_message = "The data you entered is not valid."
