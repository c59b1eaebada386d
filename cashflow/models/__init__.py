"""
Data Models Package

This package contains all Pydantic models used by the cash flow ledger.
All data flowing in or out of the ledger must conform to these schemas.
"""

from cashflow.models.ledger import (
    CashFlowBalance,
    CashFlowSummary,
    DateRange,
    IncomeCategory,
    IncomeEntry,
    IncomeFilter,
    LedgerModel,
    PeriodType,
    new_entry_id,
)

__all__ = [
    "CashFlowBalance",
    "CashFlowSummary",
    "DateRange",
    "IncomeCategory",
    "IncomeEntry",
    "IncomeFilter",
    "LedgerModel",
    "PeriodType",
    "new_entry_id",
]
