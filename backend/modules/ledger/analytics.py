"""
Expense analytics.

Pure functions over lists of expenses and ponds that back the dashboard,
reports and transactions screens. Nothing here touches the database.
"""

from collections import OrderedDict
from datetime import date
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from .models import (
    CategoryTotal,
    Expense,
    ExpenseFilter,
    MonthlyTotal,
    MonthSummary,
    Pond,
    SortOrder,
)

UNCATEGORIZED = "Other"
NO_CATEGORY = "N/A"


def _matches_search(expense: Expense, term: str) -> bool:
    if not term:
        return True
    term = term.lower()
    fields = (expense.description or "", expense.category_name, expense.pond_name)
    return any(term in field.lower() for field in fields)


def filter_expenses(expenses: Iterable[Expense], filters: ExpenseFilter) -> list[Expense]:
    """
    Apply the transactions-list search, filters and ordering.

    Search is case-insensitive over description, category and pond name.
    """
    matched = [
        e
        for e in expenses
        if _matches_search(e, filters.search)
        and (filters.pond_name is None or e.pond_name == filters.pond_name)
        and (filters.category_name is None or e.category_name == filters.category_name)
    ]

    if filters.sort == SortOrder.NEWEST:
        matched.sort(key=lambda e: e.date, reverse=True)
    elif filters.sort == SortOrder.OLDEST:
        matched.sort(key=lambda e: e.date)
    elif filters.sort == SortOrder.HIGHEST:
        matched.sort(key=lambda e: e.amount, reverse=True)
    else:
        matched.sort(key=lambda e: e.amount)
    return matched


def total_amount(expenses: Iterable[Expense]) -> Decimal:
    """Sum of expense amounts."""
    return sum((e.amount for e in expenses), Decimal("0"))


def monthly_totals(expenses: Iterable[Expense], year: int) -> list[MonthlyTotal]:
    """
    Per-month totals for `year` in calendar order.

    Months with no expenses are left out.
    """
    totals: dict[int, Decimal] = {}
    for e in expenses:
        if e.date.year != year:
            continue
        totals[e.date.month] = totals.get(e.date.month, Decimal("0")) + e.amount

    return [
        MonthlyTotal(month=date(year, month, 1).strftime("%b"), amount=totals[month])
        for month in sorted(totals)
    ]


def category_breakdown(
    expenses: Iterable[Expense],
    colors: Sequence[str],
) -> list[CategoryTotal]:
    """
    Totals per category in first-seen order, with colors cycled from `colors`.
    """
    totals: "OrderedDict[str, Decimal]" = OrderedDict()
    for e in expenses:
        name = e.category_name or UNCATEGORIZED
        totals[name] = totals.get(name, Decimal("0")) + e.amount

    return [
        CategoryTotal(name=name, value=value, color=colors[i % len(colors)] if colors else "")
        for i, (name, value) in enumerate(totals.items())
    ]


def top_category(breakdown: Sequence[CategoryTotal]) -> str:
    """Name of the category with the largest total, or "N/A"."""
    if not breakdown:
        return NO_CATEGORY
    best = breakdown[0]
    for item in breakdown[1:]:
        if item.value > best.value:
            best = item
    return best.name or NO_CATEGORY


def pond_totals(expenses: Iterable[Expense]) -> dict[str, Decimal]:
    """Total spend per pond name."""
    totals: dict[str, Decimal] = {}
    for e in expenses:
        totals[e.pond_name] = totals.get(e.pond_name, Decimal("0")) + e.amount
    return totals


def month_summary(
    expenses: Sequence[Expense],
    ponds: Sequence[Pond],
    today: Optional[date] = None,
) -> MonthSummary:
    """
    Dashboard figures: this month against last month and against budget.

    Budget usage is capped at 100%. Percent change is 100 when last month
    had no spend and this month does, 0 when neither did.
    """
    today = today or date.today()
    this_month = today.replace(day=1)
    last_month = this_month - relativedelta(months=1)

    current = total_amount(
        e for e in expenses if (e.date.year, e.date.month) == (this_month.year, this_month.month)
    )
    previous = total_amount(
        e for e in expenses if (e.date.year, e.date.month) == (last_month.year, last_month.month)
    )
    budget = sum((p.monthly_expense_budget or Decimal("0") for p in ponds), Decimal("0"))

    usage = 0.0
    if budget > 0:
        usage = min(float(current / budget * 100), 100.0)

    if previous > 0:
        change = round(float((current - previous) / previous * 100), 1)
    else:
        change = 100.0 if current > 0 else 0.0

    return MonthSummary(
        current_month_total=current,
        last_month_total=previous,
        total_budget=budget,
        budget_usage_percent=usage,
        percent_change=change,
        is_increase=current > previous,
    )
