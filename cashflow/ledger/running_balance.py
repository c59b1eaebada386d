"""
Running Balance Engine

Given the initial balance and the full (unordered) entry set,
produce the chronologically ordered, balance-annotated entry list.

GUARANTEES:
- Order is (date, timestamp) ascending; the sort is stable
- Input entries are never mutated; annotated copies are returned
- Idempotent: running it on its own output changes nothing
- Pure: no storage, no clock

The ledger re-runs this over the WHOLE entry set after every
insert, update and delete. It is never applied to a subset.
"""

from decimal import Decimal
from typing import Iterable, NamedTuple

from cashflow.models.ledger import IncomeEntry


class RunningBalance(NamedTuple):
    """Result of a running balance pass."""
    entries: list[IncomeEntry]
    current_balance: Decimal
    total_income: Decimal


def sort_chronologically(entries: Iterable[IncomeEntry]) -> list[IncomeEntry]:
    """Sort by (date, timestamp) ascending."""
    return sorted(entries, key=lambda entry: entry.sort_key)


def calculate_running_balance(
    initial_balance: Decimal,
    entries: Iterable[IncomeEntry],
) -> RunningBalance:
    """
    Annotate every entry with the balance right after it.

    Args:
        initial_balance: Balance before the first entry
        entries: All entries belonging to this balance, any order

    Returns:
        RunningBalance with the sorted annotated copies, the final
        running balance and the sum of all amounts
    """
    running = Decimal(initial_balance)
    total_income = Decimal("0")
    annotated = []

    for entry in sort_chronologically(entries):
        running += entry.amount
        total_income += entry.amount
        annotated.append(entry.model_copy(update={"balance_after": running}))

    return RunningBalance(
        entries=annotated,
        current_balance=running,
        total_income=total_income,
    )
