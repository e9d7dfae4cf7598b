"""
Base exception classes for the Aqua Farm Ledger backend.

The session and ledger modules raise subclasses of these. The bases follow
the failure kinds the app shows differently to a farmer:

- NotFoundError: a pond, expense or profile row is missing
- ValidationError: a form submitted bad or incomplete values
- AuthenticationError / AuthorizationError: the session is gone, belongs
  to someone else, or row-level security refused the query
- ExternalServiceError: Supabase could not be reached or failed; these
  are transient and worth retrying
"""

from typing import Optional, Any


class LedgerError(Exception):
    """
    Base exception for all Aqua Farm Ledger errors.

    `code` is a stable identifier screens can switch on; `message` is
    already phrased for the user.
    """

    transient = False

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to a dictionary for an error banner or log line."""
        return {
            "error": self.code,
            "message": self.message,
            "transient": self.transient,
            "details": self.details,
        }


class NotFoundError(LedgerError):
    """A pond, expense or profile row does not exist or is not visible."""

    pass


class ValidationError(LedgerError):
    """Submitted values were rejected."""

    pass


class AuthenticationError(LedgerError):
    """No session, an expired one, or one that belongs to another user."""

    pass


class AuthorizationError(LedgerError):
    """Row-level security rejected the query."""

    pass


class ExternalServiceError(LedgerError):
    """Supabase auth or database could not complete the request."""

    transient = True

    def __init__(
        self,
        message: str,
        service: str,
        code: Optional[str] = None,
        details: Optional[dict[str, Any]] = None,
    ):
        super().__init__(message, code, details)
        self.service = service
        self.details["service"] = service
