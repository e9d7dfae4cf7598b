"""
Ledger service implementation.

Wraps the repository with session checks, a short-lived read cache and
the analytics helpers the dashboard and reports screens need.
"""

import logging
from datetime import date, datetime, timezone
from typing import Optional, Sequence

from shared.config import get_settings

from . import analytics
from .exceptions import MissingSessionError
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
)
from .repository import LedgerRepository

logger = logging.getLogger(__name__)


class LedgerService:
    """
    Ledger operations for the signed-in user.

    List results are cached per user for `cache_ttl` seconds. Any write
    drops the whole cache; clear_cache() does the same when the signed-in
    user changes.
    """

    def __init__(
        self,
        repository: LedgerRepository,
        cache_ttl: Optional[int] = None,
        colors: Optional[Sequence[str]] = None,
    ):
        settings = get_settings()
        self._repo = repository
        self._cache_ttl = settings.ledger_cache_ttl if cache_ttl is None else cache_ttl
        self._colors = list(colors) if colors is not None else list(settings.category_colors)
        self._cache: dict[tuple, tuple[datetime, list]] = {}

    # -------------------------------------------------------------------------
    # Cache
    # -------------------------------------------------------------------------

    def clear_cache(self) -> None:
        """Drop every cached list."""
        if self._cache:
            logger.debug("Clearing ledger cache (%d entries)", len(self._cache))
        self._cache.clear()

    def _cached(self, key: tuple) -> Optional[list]:
        entry = self._cache.get(key)
        if entry is None:
            return None
        stored_at, value = entry
        age = (datetime.now(timezone.utc) - stored_at).total_seconds()
        if age >= self._cache_ttl:
            del self._cache[key]
            return None
        return list(value)

    def _store(self, key: tuple, value: list) -> list:
        # Callers get copies so sorting or appending never touches the cache.
        self._cache[key] = (datetime.now(timezone.utc), list(value))
        return list(value)

    @staticmethod
    def _require_user(user_id: Optional[str]) -> str:
        if not user_id:
            raise MissingSessionError()
        return user_id

    # -------------------------------------------------------------------------
    # Ponds
    # -------------------------------------------------------------------------

    async def list_ponds(self, user_id: Optional[str]) -> list[Pond]:
        """List the user's ponds, newest first."""
        key = ("ponds", self._require_user(user_id))
        cached = self._cached(key)
        if cached is not None:
            return cached
        return self._store(key, await self._repo.list_ponds())

    async def create_pond(self, user_id: Optional[str], data: PondCreate) -> Pond:
        """Create a pond owned by the user."""
        pond = await self._repo.create_pond(self._require_user(user_id), data)
        self.clear_cache()
        return pond

    async def update_pond(self, user_id: Optional[str], pond_id: str, data: PondUpdate) -> Pond:
        self._require_user(user_id)
        pond = await self._repo.update_pond(pond_id, data)
        self.clear_cache()
        return pond

    async def delete_pond(self, user_id: Optional[str], pond_id: str) -> None:
        self._require_user(user_id)
        await self._repo.delete_pond(pond_id)
        self.clear_cache()

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def list_expenses(
        self,
        user_id: Optional[str],
        pond_id: Optional[str] = None,
    ) -> list[Expense]:
        """List the user's expenses (optionally for one pond), newest first."""
        key = ("expenses", self._require_user(user_id), pond_id)
        cached = self._cached(key)
        if cached is not None:
            return cached
        return self._store(key, await self._repo.list_expenses(pond_id=pond_id))

    async def search_expenses(
        self,
        user_id: Optional[str],
        filters: ExpenseFilter,
    ) -> list[Expense]:
        """Apply the transactions-list filters to the user's expenses."""
        return analytics.filter_expenses(await self.list_expenses(user_id), filters)

    async def create_expense(self, user_id: Optional[str], data: ExpenseCreate) -> Expense:
        """Record an expense owned by the user."""
        expense = await self._repo.create_expense(self._require_user(user_id), data)
        self.clear_cache()
        return expense

    async def update_expense(
        self,
        user_id: Optional[str],
        expense_id: str,
        data: ExpenseUpdate,
    ) -> Expense:
        self._require_user(user_id)
        expense = await self._repo.update_expense(expense_id, data)
        self.clear_cache()
        return expense

    async def delete_expense(self, user_id: Optional[str], expense_id: str) -> None:
        self._require_user(user_id)
        await self._repo.delete_expense(expense_id)
        self.clear_cache()

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self, user_id: Optional[str]) -> list[ExpenseCategory]:
        key = ("categories", self._require_user(user_id))
        cached = self._cached(key)
        if cached is not None:
            return cached
        return self._store(key, await self._repo.list_categories())

    # -------------------------------------------------------------------------
    # Analytics
    # -------------------------------------------------------------------------

    async def monthly_totals(self, user_id: Optional[str], year: int) -> list[MonthlyTotal]:
        """Per-month totals for one year."""
        self._require_user(user_id)
        expenses = await self._repo.list_expenses(
            start=date(year, 1, 1),
            end=date(year, 12, 31),
        )
        return analytics.monthly_totals(expenses, year)

    async def category_breakdown(self, user_id: Optional[str]) -> list[CategoryTotal]:
        """Totals per category with chart colors."""
        expenses = await self.list_expenses(user_id)
        return analytics.category_breakdown(expenses, self._colors)

    async def month_summary(
        self,
        user_id: Optional[str],
        today: Optional[date] = None,
    ) -> MonthSummary:
        """Dashboard figures for the current month."""
        expenses = await self.list_expenses(user_id)
        ponds = await self.list_ponds(user_id)
        return analytics.month_summary(expenses, ponds, today)
