"""Running balance engine package."""

from cashflow.ledger.clock import MonotonicClock, default_clock
from cashflow.ledger.running_balance import (
    RunningBalance,
    calculate_running_balance,
    sort_chronologically,
)

__all__ = [
    "MonotonicClock",
    "RunningBalance",
    "calculate_running_balance",
    "default_clock",
    "sort_chronologically",
]
