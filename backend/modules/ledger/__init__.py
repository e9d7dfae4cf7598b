"""
Ledger module.

Ponds, expense categories and expenses for a farm, plus the analytics
behind the dashboard and reports.

Public API:
- LedgerService: Session-aware ledger operations with a read cache
- LedgerRepository: Supabase table access
- Ledger models: Pond, Expense, ExpenseCategory, ExpenseFilter, etc.
- Ledger exceptions: PondNotFoundError, PermissionDeniedError, etc.
"""

from .repository import LedgerRepository
from .service import LedgerService
from .models import (
    CategoryTotal,
    Expense,
    ExpenseCategory,
    ExpenseCreate,
    ExpenseFilter,
    ExpenseUpdate,
    MonthlyTotal,
    MonthSummary,
    Pond,
    PondCreate,
    PondUpdate,
    SortOrder,
)
from .exceptions import (
    ExpenseNotFoundError,
    LedgerQueryError,
    MissingSessionError,
    PermissionDeniedError,
    PondNotFoundError,
    RelatedRecordError,
    RequiredFieldError,
)

__all__ = [
    # Services
    "LedgerRepository",
    "LedgerService",
    # Models
    "CategoryTotal",
    "Expense",
    "ExpenseCategory",
    "ExpenseCreate",
    "ExpenseFilter",
    "ExpenseUpdate",
    "MonthlyTotal",
    "MonthSummary",
    "Pond",
    "PondCreate",
    "PondUpdate",
    "SortOrder",
    # Exceptions
    "ExpenseNotFoundError",
    "LedgerQueryError",
    "MissingSessionError",
    "PermissionDeniedError",
    "PondNotFoundError",
    "RelatedRecordError",
    "RequiredFieldError",
]
