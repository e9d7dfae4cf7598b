"""
Pytest fixtures for ledger module tests.

Provides a small farm's worth of ponds and expenses.
"""

from datetime import date
from decimal import Decimal

import pytest

from fakes import make_expense
from modules.ledger.models import Expense, Pond


@pytest.fixture
def ponds() -> list[Pond]:
    return [
        Pond(id="pond-north", user_id="user-123", name="North Pond",
             monthly_expense_budget=Decimal("20000")),
        Pond(id="pond-south", user_id="user-123", name="South Pond",
             monthly_expense_budget=Decimal("10000")),
    ]


@pytest.fixture
def expenses() -> list[Expense]:
    """Expenses across March and April 2026, newest first."""
    return [
        make_expense("e5", "4500", date(2026, 4, 20), "Labour", "South Pond", "Harvest crew"),
        make_expense("e4", "12000", date(2026, 4, 10), "Feed", "North Pond", "Floating feed 40 bags"),
        make_expense("e3", "1500", date(2026, 4, 2), "Electricity", "North Pond", "Aerator bill"),
        make_expense("e2", "8000", date(2026, 3, 15), "Feed", "South Pond"),
        make_expense("e1", "2000", date(2026, 3, 1), "Medicine", "North Pond", "Lime and probiotics"),
    ]
