"""
Cash Flow Ledger - Source Package

The cash-flow core of a personal finance app: dated income entries
anchored to an initial balance, with a running balance and period
summaries derived from them.

DESIGN PRINCIPLES:
1. Entries are the source of truth, the balance is a cache
2. Validate before touching storage
3. Money is Decimal, never float
4. Recompute the whole running balance on every change
5. Storage layer is swappable
"""

from cashflow.errors import (
    BalanceNotInitializedError,
    CashFlowError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from cashflow.orchestrator import CashFlowLedger, create_ledger

__version__ = "1.0.0"

__all__ = [
    "BalanceNotInitializedError",
    "CashFlowError",
    "CashFlowLedger",
    "NotFoundError",
    "StorageError",
    "ValidationError",
    "create_ledger",
]
