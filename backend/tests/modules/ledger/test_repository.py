"""Tests for the ledger repository."""

from datetime import date
from decimal import Decimal
from types import SimpleNamespace

import pytest
from postgrest.exceptions import APIError

from fakes import mock_db
from modules.ledger.exceptions import (
    ExpenseNotFoundError,
    LedgerQueryError,
    PermissionDeniedError,
    PondNotFoundError,
    RelatedRecordError,
)
from modules.ledger.models import ExpenseCreate, ExpenseUpdate, PondCreate, PondUpdate
from modules.ledger.repository import EXPENSE_COLUMNS, LedgerRepository


def create_mock_pond_data(pond_id: str = "pond-north", name: str = "North Pond") -> dict:
    """Helper to create a ponds row."""
    return {
        "id": pond_id,
        "user_id": "user-123",
        "name": name,
        "location": "Bhimavaram",
        "size_acres": "2.5",
        "monthly_expense_budget": "20000",
        "created_at": "2026-01-05T10:00:00+00:00",
        "updated_at": "2026-01-05T10:00:00+00:00",
    }


def create_mock_expense_data(
    expense_id: str = "exp-1",
    pond: dict | None = None,
    category: dict | None = None,
) -> dict:
    """Helper to create an expenses row with its joins."""
    return {
        "id": expense_id,
        "user_id": "user-123",
        "pond_id": "pond-north",
        "category_id": "cat-feed",
        "amount": "12000.50",
        "date": "2026-04-10",
        "description": "Floating feed",
        "created_at": "2026-04-10T08:00:00+00:00",
        "ponds": pond,
        "expense_categories": category,
    }


class TestPonds:
    @pytest.mark.asyncio
    async def test_list_ponds(self):
        db, query = mock_db([create_mock_pond_data(), create_mock_pond_data("pond-south", "South Pond")])

        ponds = await LedgerRepository(db).list_ponds()

        assert [p.name for p in ponds] == ["North Pond", "South Pond"]
        assert ponds[0].size_acres == Decimal("2.5")
        db.table.assert_called_once_with("ponds")
        query.order.assert_called_once_with("created_at", desc=True)

    @pytest.mark.asyncio
    async def test_list_ponds_empty(self):
        db, _ = mock_db(None)
        assert await LedgerRepository(db).list_ponds() == []

    @pytest.mark.asyncio
    async def test_create_pond_sets_owner(self):
        db, query = mock_db([create_mock_pond_data()])

        await LedgerRepository(db).create_pond(
            "user-123", PondCreate(name="North Pond", monthly_expense_budget=Decimal("20000"))
        )

        payload = query.insert.call_args.args[0]
        assert payload == {
            "name": "North Pond",
            "monthly_expense_budget": "20000",
            "user_id": "user-123",
        }

    @pytest.mark.asyncio
    async def test_update_pond_sends_only_given_fields(self):
        db, query = mock_db([create_mock_pond_data(name="Renamed")])

        pond = await LedgerRepository(db).update_pond("pond-north", PondUpdate(name="Renamed"))

        assert pond.name == "Renamed"
        query.update.assert_called_once_with({"name": "Renamed"})
        query.eq.assert_called_once_with("id", "pond-north")

    @pytest.mark.asyncio
    async def test_update_missing_pond(self):
        db, _ = mock_db([])

        with pytest.raises(PondNotFoundError):
            await LedgerRepository(db).update_pond("pond-x", PondUpdate(name="X"))

    @pytest.mark.asyncio
    async def test_delete_pond(self):
        db, query = mock_db([])

        await LedgerRepository(db).delete_pond("pond-north")

        query.delete.assert_called_once()
        query.eq.assert_called_once_with("id", "pond-north")


class TestExpenses:
    @pytest.mark.asyncio
    async def test_list_expenses_flattens_joins(self):
        db, query = mock_db([
            create_mock_expense_data(pond={"name": "North Pond"}, category={"name": "Feed"}),
        ])

        expenses = await LedgerRepository(db).list_expenses()

        assert expenses[0].pond_name == "North Pond"
        assert expenses[0].category_name == "Feed"
        assert expenses[0].amount == Decimal("12000.50")
        assert expenses[0].date == date(2026, 4, 10)
        query.select.assert_called_once_with(EXPENSE_COLUMNS)
        query.order.assert_called_once_with("date", desc=True)

    @pytest.mark.asyncio
    async def test_missing_joins_become_empty_names(self):
        db, _ = mock_db([create_mock_expense_data()])

        expenses = await LedgerRepository(db).list_expenses()

        assert expenses[0].pond_name == ""
        assert expenses[0].category_name == ""

    @pytest.mark.asyncio
    async def test_list_expenses_filters(self):
        db, query = mock_db([])

        await LedgerRepository(db).list_expenses(
            pond_id="pond-north",
            start=date(2026, 1, 1),
            end=date(2026, 12, 31),
        )

        query.eq.assert_called_once_with("pond_id", "pond-north")
        query.gte.assert_called_once_with("date", "2026-01-01")
        query.lte.assert_called_once_with("date", "2026-12-31")

    @pytest.mark.asyncio
    async def test_create_expense_serializes_values(self):
        db, query = mock_db([create_mock_expense_data()])

        await LedgerRepository(db).create_expense(
            "user-123",
            ExpenseCreate(
                pond_id="pond-north",
                category_id="cat-feed",
                amount=Decimal("12000.50"),
                date=date(2026, 4, 10),
            ),
        )

        payload = query.insert.call_args.args[0]
        assert payload == {
            "pond_id": "pond-north",
            "category_id": "cat-feed",
            "amount": "12000.50",
            "date": "2026-04-10",
            "user_id": "user-123",
        }

    @pytest.mark.asyncio
    async def test_create_expense_returns_joined_names(self):
        """The written row is read back with its pond and category names."""
        db, query = mock_db()
        query.execute.side_effect = [
            SimpleNamespace(data=[create_mock_expense_data()]),
            SimpleNamespace(
                data=[create_mock_expense_data(pond={"name": "North Pond"}, category={"name": "Feed"})]
            ),
        ]

        expense = await LedgerRepository(db).create_expense(
            "user-123",
            ExpenseCreate(
                pond_id="pond-north",
                category_id="cat-feed",
                amount=Decimal("12000.50"),
                date=date(2026, 4, 10),
            ),
        )

        assert expense.pond_name == "North Pond"
        assert expense.category_name == "Feed"
        query.select.assert_called_once_with(EXPENSE_COLUMNS)
        query.eq.assert_called_once_with("id", "exp-1")

    @pytest.mark.asyncio
    async def test_update_expense_returns_joined_names(self):
        db, query = mock_db()
        query.execute.side_effect = [
            SimpleNamespace(data=[create_mock_expense_data()]),
            SimpleNamespace(
                data=[create_mock_expense_data(pond={"name": "South Pond"}, category={"name": "Labour"})]
            ),
        ]

        expense = await LedgerRepository(db).update_expense(
            "exp-1", ExpenseUpdate(description="Aerator repair")
        )

        assert expense.pond_name == "South Pond"
        assert expense.category_name == "Labour"
        assert query.execute.await_count == 2

    @pytest.mark.asyncio
    async def test_update_missing_expense(self):
        db, _ = mock_db([])

        with pytest.raises(ExpenseNotFoundError):
            await LedgerRepository(db).update_expense("exp-x", ExpenseUpdate(description="x"))


class TestCategories:
    @pytest.mark.asyncio
    async def test_list_categories(self):
        db, query = mock_db([{"id": "cat-feed", "name": "Feed"}])

        categories = await LedgerRepository(db).list_categories()

        assert categories[0].name == "Feed"
        db.table.assert_called_once_with("expense_categories")
        query.order.assert_called_once_with("name")


class TestErrorMapping:
    @pytest.mark.asyncio
    async def test_foreign_key_violation(self):
        db, _ = mock_db(error=APIError({"code": "23503", "message": "violates foreign key"}))

        with pytest.raises(RelatedRecordError) as exc_info:
            await LedgerRepository(db).create_expense(
                "user-123",
                ExpenseCreate(
                    pond_id="missing",
                    category_id="cat-feed",
                    amount=Decimal("1"),
                    date=date(2026, 4, 10),
                ),
            )

        assert exc_info.value.details == {"action": "create expense"}

    @pytest.mark.asyncio
    async def test_row_level_security(self):
        db, _ = mock_db(error=APIError({"code": "42501", "message": "permission denied"}))

        with pytest.raises(PermissionDeniedError):
            await LedgerRepository(db).list_ponds()

    @pytest.mark.asyncio
    async def test_other_errors(self):
        db, _ = mock_db(error=APIError({"code": "PGRST301", "message": "JWT expired"}))

        with pytest.raises(LedgerQueryError) as exc_info:
            await LedgerRepository(db).list_expenses(pond_id="pond-north")

        assert exc_info.value.details["db_code"] == "PGRST301"
        assert "fetch expenses for pond pond-north" in exc_info.value.message
