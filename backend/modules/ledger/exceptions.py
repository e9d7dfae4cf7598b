"""
Ledger module exceptions.

PostgREST error codes from the ponds and expenses tables are mapped onto
these so callers can show a specific message.
"""

from typing import Optional

from shared.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ExternalServiceError,
    LedgerError,
    NotFoundError,
    ValidationError,
)


class MissingSessionError(AuthenticationError):
    """Raised when a ledger write is attempted without a signed-in user."""

    def __init__(self):
        super().__init__(
            "No active session. Please log in again.",
            code="MISSING_SESSION",
        )


class PondNotFoundError(NotFoundError):
    """Raised when a pond doesn't exist or isn't visible to the user."""

    def __init__(self, pond_id: str):
        super().__init__(
            f"Pond not found: {pond_id}",
            code="POND_NOT_FOUND",
            details={"pond_id": pond_id},
        )


class ExpenseNotFoundError(NotFoundError):
    """Raised when an expense doesn't exist or isn't visible to the user."""

    def __init__(self, expense_id: str):
        super().__init__(
            f"Expense not found: {expense_id}",
            code="EXPENSE_NOT_FOUND",
            details={"expense_id": expense_id},
        )


class RelatedRecordError(ValidationError):
    """Raised when a write references a pond, category or profile that doesn't exist."""

    def __init__(self, action: str):
        super().__init__(
            f"Failed to {action}. Please ensure the related pond, category and profile exist.",
            code="RELATED_RECORD_MISSING",
            details={"action": action},
        )


class RequiredFieldError(ValidationError):
    """Raised when the database rejects a null in a required column."""

    def __init__(self, action: str):
        super().__init__(
            f"Failed to {action}. Required field missing or null.",
            code="REQUIRED_FIELD_MISSING",
            details={"action": action},
        )


class PermissionDeniedError(AuthorizationError):
    """Raised when row-level security rejects a query."""

    def __init__(self, action: str):
        super().__init__(
            f"Permission denied while trying to {action}.",
            code="PERMISSION_DENIED",
            details={"action": action},
        )


class LedgerQueryError(ExternalServiceError):
    """Raised for any other database failure."""

    def __init__(self, action: str, message: str, db_code: Optional[str] = None):
        super().__init__(
            f"Error while trying to {action}: {message}",
            service="supabase",
            code="LEDGER_QUERY_FAILED",
            details={"action": action, "db_code": db_code} if db_code else {"action": action},
        )


def map_database_error(action: str, code: Optional[str], message: str) -> LedgerError:
    """
    Translate a PostgREST error code into a ledger exception.

    Args:
        action: What was being attempted, e.g. "create expense"
        code: Postgres / PostgREST error code
        message: Error message from the database
    """
    if code == "23503":
        return RelatedRecordError(action)
    if code == "42501":
        return PermissionDeniedError(action)
    if code == "23502":
        return RequiredFieldError(action)
    return LedgerQueryError(action, message, code)
