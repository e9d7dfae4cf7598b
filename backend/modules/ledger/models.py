"""
Ledger module data models.

Ponds, expense categories and expenses as stored in Supabase, plus the
shapes produced by the analytics helpers.
"""

from datetime import date as date_type, datetime
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class SortOrder(str, Enum):
    """Orderings offered by the transactions list."""

    NEWEST = "newest"
    OLDEST = "oldest"
    HIGHEST = "highest"
    LOWEST = "lowest"


class Pond(BaseModel):
    """A pond (or tank) the farm records expenses against."""

    id: str = Field(..., description="Pond ID (UUID)")
    user_id: str = Field(..., description="Owner's user ID")
    name: str = Field(..., description="Display name")
    location: Optional[str] = Field(None, description="Where the pond is")
    size_acres: Optional[Decimal] = Field(None, description="Water surface area")
    monthly_expense_budget: Optional[Decimal] = Field(
        None, description="Budget for a calendar month"
    )
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


class PondCreate(BaseModel):
    """Fields for a new pond; the owner comes from the session."""

    name: str = Field(..., min_length=1)
    location: Optional[str] = None
    size_acres: Optional[Decimal] = Field(None, ge=0)
    monthly_expense_budget: Optional[Decimal] = Field(None, ge=0)

    model_config = ConfigDict(extra="forbid")


class PondUpdate(BaseModel):
    """Partial pond update."""

    name: Optional[str] = Field(None, min_length=1)
    location: Optional[str] = None
    size_acres: Optional[Decimal] = Field(None, ge=0)
    monthly_expense_budget: Optional[Decimal] = Field(None, ge=0)

    model_config = ConfigDict(extra="forbid")


class ExpenseCategory(BaseModel):
    """A shared expense category (feed, labour, electricity...)."""

    id: str
    name: str

    model_config = ConfigDict(extra="ignore")


class Expense(BaseModel):
    """
    An expense row joined with its pond and category names.

    The names are empty strings when the related row is missing.
    """

    id: str = Field(..., description="Expense ID (UUID)")
    user_id: str = Field(..., description="Owner's user ID")
    pond_id: str = Field(..., description="Pond the expense belongs to")
    category_id: str = Field(..., description="Expense category")
    amount: Decimal = Field(..., description="Amount in rupees")
    date: date_type = Field(..., description="Day the expense was incurred")
    description: Optional[str] = None
    pond_name: str = ""
    category_name: str = ""
    created_at: Optional[datetime] = None

    model_config = ConfigDict(extra="ignore")


class ExpenseCreate(BaseModel):
    """Fields for a new expense; the owner comes from the session."""

    pond_id: str
    category_id: str
    amount: Decimal = Field(..., gt=0)
    date: date_type
    description: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class ExpenseUpdate(BaseModel):
    """Partial expense update."""

    pond_id: Optional[str] = None
    category_id: Optional[str] = None
    amount: Optional[Decimal] = Field(None, gt=0)
    date: Optional[date_type] = None
    description: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


class ExpenseFilter(BaseModel):
    """
    Filters applied to the transactions list.

    None for pond_name or category_name means "all".
    """

    search: str = ""
    pond_name: Optional[str] = None
    category_name: Optional[str] = None
    sort: SortOrder = SortOrder.NEWEST


class MonthlyTotal(BaseModel):
    """Total spend for one calendar month."""

    month: str = Field(..., description="Short month name, e.g. 'Jan'")
    amount: Decimal


class CategoryTotal(BaseModel):
    """Total spend for one category, with its chart color."""

    name: str
    value: Decimal
    color: str


class MonthSummary(BaseModel):
    """Dashboard figures for the current month."""

    current_month_total: Decimal
    last_month_total: Decimal
    total_budget: Decimal
    budget_usage_percent: float = Field(..., ge=0, le=100)
    percent_change: float
    is_increase: bool
