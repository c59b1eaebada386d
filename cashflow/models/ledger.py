"""
Core Data Models for the Cash Flow Ledger

These models define the schemas for everything the ledger stores or returns.
They are designed to:
1. Keep money exact (Decimal, never float)
2. Serialize to the same camelCase JSON the mobile app persisted
3. Accept both snake_case and camelCase on input

DESIGN DECISION: balance_after is denormalized onto each entry.
It is derived data and is recomputed by the running balance engine
after every mutation. Nothing else ever sets it.
"""

import datetime as dt
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class IncomeCategory(str, Enum):
    """
    Supported income categories.

    Values are the display names the app has always stored.
    """
    SALARY = "Salary"
    FREELANCE = "Freelance"
    INVESTMENT = "Investment"
    BUSINESS = "Business"
    RENTAL = "Rental"
    GIFT = "Gift"
    REFUND = "Refund"
    BONUS = "Bonus"
    OTHER = "Other"


class PeriodType(str, Enum):
    """Aggregation boundary of a summary."""
    MONTH = "month"
    YEAR = "year"
    CUSTOM = "custom"


class LedgerModel(BaseModel):
    """Shared config: camelCase JSON, snake_case attributes."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )

    def to_json_dict(self) -> dict:
        """JSON-safe dict using the persisted (camelCase) keys."""
        return self.model_dump(mode="json", by_alias=True)


def new_entry_id() -> str:
    """Generate an opaque identifier for a new entry."""
    return str(uuid4())


# =============================================================================
# LEDGER RECORDS
# =============================================================================

class IncomeEntry(LedgerModel):
    """
    One recorded inflow of money.

    Ordering for balance purposes is (date, timestamp).
    timestamp breaks ties between entries on the same date.
    """

    id: str = Field(
        default_factory=new_entry_id,
        min_length=1,
        description="Opaque unique identifier, immutable"
    )
    amount: Decimal = Field(
        ...,
        gt=0,
        decimal_places=2,
        description="Amount received"
    )
    date: dt.date = Field(
        ...,
        description="Calendar date the money was received"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=200,
    )
    category: IncomeCategory
    timestamp: int = Field(
        ...,
        ge=0,
        description="Creation instant in epoch milliseconds"
    )
    balance_after: Optional[Decimal] = Field(
        default=None,
        description="Running balance right after this entry (derived)"
    )

    # Tags only, nothing in the ledger interprets these
    is_recurring: Optional[bool] = None
    recurring_id: Optional[str] = None

    @property
    def sort_key(self) -> tuple[dt.date, int]:
        """Chronological position used by the running balance."""
        return (self.date, self.timestamp)


class CashFlowBalance(LedgerModel):
    """
    The balance singleton.

    initial_balance is set once during setup. Everything else is a
    cache derived from initial_balance and the entry set.
    """

    initial_balance: Decimal = Field(
        ...,
        decimal_places=2,
    )
    current_balance: Decimal
    total_income: Decimal = Decimal("0")
    # Always zero, no expense-bearing mutation exists
    total_expenses: Decimal = Decimal("0")
    last_updated: int = Field(
        ...,
        ge=0,
        description="Epoch milliseconds of the last write"
    )
    last_entry_id: Optional[str] = None


class CashFlowSummary(LedgerModel):
    """
    Aggregates for one period. Computed on demand, never persisted.
    """

    period: str = Field(
        ...,
        description="YYYY-MM, YYYY, or start..end for custom ranges"
    )
    period_type: PeriodType
    total_income: Decimal
    total_expenses: Decimal = Decimal("0")
    net_cash_flow: Decimal
    entry_count: int = Field(ge=0)
    average_income: Decimal
    start_balance: Decimal
    end_balance: Decimal
    category_breakdown: dict[IncomeCategory, Decimal] = Field(
        default_factory=dict
    )
    trend: Decimal = Field(
        default=Decimal("0"),
        description="Percent change in net cash flow vs the previous period"
    )


# =============================================================================
# QUERY MODELS
# =============================================================================

class DateRange(LedgerModel):
    """Inclusive date range."""

    start_date: dt.date
    end_date: dt.date

    @model_validator(mode='after')
    def validate_order(self) -> 'DateRange':
        if self.end_date < self.start_date:
            raise ValueError("End date cannot be before start date")
        return self

    def contains(self, day: dt.date) -> bool:
        return self.start_date <= day <= self.end_date


class IncomeFilter(LedgerModel):
    """
    Filter criteria for listing entries.

    Dimensions combine with AND. A dimension left as None
    (or an empty category list / empty search text) does not restrict.
    search_text is matched exactly as typed, surrounding spaces included.
    """
    model_config = ConfigDict(str_strip_whitespace=False)

    date_range: Optional[DateRange] = None
    categories: Optional[list[IncomeCategory]] = None
    min_amount: Optional[Decimal] = None
    max_amount: Optional[Decimal] = None
    search_text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return (
            self.date_range is None
            and not self.categories
            and self.min_amount is None
            and self.max_amount is None
            and not self.search_text
        )
