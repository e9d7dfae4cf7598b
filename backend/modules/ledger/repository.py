"""
Ledger repository for database access.

Encapsulates all Supabase queries and data mapping for the ledger tables:
- ponds
- expenses
- expense_categories
"""

from datetime import date
from typing import Any, Optional

from postgrest.exceptions import APIError

from shared.repository import BaseRepository
from .exceptions import ExpenseNotFoundError, PondNotFoundError, map_database_error
from .models import (
    Expense,
    ExpenseCategory,
    ExpenseCreate,
    ExpenseUpdate,
    Pond,
    PondCreate,
    PondUpdate,
)

EXPENSE_COLUMNS = "*, ponds(name), expense_categories(name)"


class LedgerRepository(BaseRepository[Expense]):
    """
    Repository for ledger data access.

    Row Level Security scopes every query to the signed-in user, so this
    repository does NOT filter by owner on reads. Writes stamp the owner
    given by the caller.
    """

    async def _execute(self, query: Any, action: str) -> Any:
        try:
            return await query.execute()
        except APIError as exc:
            raise map_database_error(action, exc.code, exc.message or str(exc)) from exc

    # -------------------------------------------------------------------------
    # Ponds
    # -------------------------------------------------------------------------

    async def list_ponds(self) -> list[Pond]:
        """List ponds, newest first."""
        query = self._db.table("ponds").select("*").order("created_at", desc=True)
        result = await self._execute(query, "fetch ponds")
        return [Pond(**row) for row in result.data or []]

    async def create_pond(self, user_id: str, data: PondCreate) -> Pond:
        """Insert a pond owned by `user_id`."""
        payload = {**data.model_dump(mode="json", exclude_none=True), "user_id": user_id}
        query = self._db.table("ponds").insert(payload)
        result = await self._execute(query, "create pond")
        return Pond(**result.data[0])

    async def update_pond(self, pond_id: str, data: PondUpdate) -> Pond:
        """Apply a partial update to a pond."""
        payload = data.model_dump(mode="json", exclude_unset=True)
        query = self._db.table("ponds").update(payload).eq("id", pond_id)
        result = await self._execute(query, f"update pond {pond_id}")
        if not result.data:
            raise PondNotFoundError(pond_id)
        return Pond(**result.data[0])

    async def delete_pond(self, pond_id: str) -> None:
        """Delete a pond."""
        query = self._db.table("ponds").delete().eq("id", pond_id)
        await self._execute(query, f"delete pond {pond_id}")

    # -------------------------------------------------------------------------
    # Expenses
    # -------------------------------------------------------------------------

    async def list_expenses(
        self,
        pond_id: Optional[str] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> list[Expense]:
        """
        List expenses with pond and category names, newest date first.

        Args:
            pond_id: Only expenses for this pond.
            start: Earliest date (inclusive).
            end: Latest date (inclusive).
        """
        query = self._db.table("expenses").select(EXPENSE_COLUMNS)
        if pond_id:
            query = query.eq("pond_id", pond_id)
        if start:
            query = query.gte("date", start.isoformat())
        if end:
            query = query.lte("date", end.isoformat())
        query = query.order("date", desc=True)

        action = f"fetch expenses for pond {pond_id}" if pond_id else "fetch expenses"
        result = await self._execute(query, action)
        return [self._map_to_expense(row) for row in result.data or []]

    async def create_expense(self, user_id: str, data: ExpenseCreate) -> Expense:
        """Insert an expense owned by `user_id` and return it with its joined names."""
        payload = {**data.model_dump(mode="json", exclude_none=True), "user_id": user_id}
        query = self._db.table("expenses").insert(payload)
        result = await self._execute(query, "create expense")
        return await self._get_expense(result.data[0]["id"])

    async def update_expense(self, expense_id: str, data: ExpenseUpdate) -> Expense:
        """Apply a partial update to an expense."""
        payload = data.model_dump(mode="json", exclude_unset=True)
        query = self._db.table("expenses").update(payload).eq("id", expense_id)
        result = await self._execute(query, f"update expense {expense_id}")
        if not result.data:
            raise ExpenseNotFoundError(expense_id)
        return await self._get_expense(expense_id)

    async def _get_expense(self, expense_id: str) -> Expense:
        # Insert and update return the bare row; the names need the joins.
        query = self._db.table("expenses").select(EXPENSE_COLUMNS).eq("id", expense_id)
        result = await self._execute(query, f"fetch expense {expense_id}")
        if not result.data:
            raise ExpenseNotFoundError(expense_id)
        return self._map_to_expense(result.data[0])

    async def delete_expense(self, expense_id: str) -> None:
        """Delete an expense."""
        query = self._db.table("expenses").delete().eq("id", expense_id)
        await self._execute(query, f"delete expense {expense_id}")

    # -------------------------------------------------------------------------
    # Categories
    # -------------------------------------------------------------------------

    async def list_categories(self) -> list[ExpenseCategory]:
        """List expense categories ordered by name."""
        query = self._db.table("expense_categories").select("*").order("name")
        result = await self._execute(query, "fetch expense categories")
        return [ExpenseCategory(**row) for row in result.data or []]

    # -------------------------------------------------------------------------
    # Mapping helpers
    # -------------------------------------------------------------------------

    def _map_to_expense(self, row: dict[str, Any]) -> Expense:
        """Flatten the joined pond and category names into the expense."""
        pond = row.get("ponds") or {}
        category = row.get("expense_categories") or {}
        data = {k: v for k, v in row.items() if k not in ("ponds", "expense_categories")}
        return Expense(
            **data,
            pond_name=pond.get("name") or "",
            category_name=category.get("name") or "",
        )
