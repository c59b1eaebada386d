"""
Entry Query / Filter Engine

DESIGN DECISION: Filtering is DETERMINISTIC and runs in Python over
a snapshot of entries. The key-value backend has no query capability,
so every filter is applied here.

IMPORTANT: Filtered results are ordered by timestamp DESCENDING
(most recently entered first) for display. That is NOT the
(date, timestamp) order the running balance uses. Callers must not
assume a filtered list is in balance order.
"""

from decimal import Decimal
from typing import Iterable, Optional

from cashflow.models.ledger import DateRange, IncomeEntry, IncomeFilter


def sort_newest_first(entries: Iterable[IncomeEntry]) -> list[IncomeEntry]:
    """Display order: most recently created first."""
    return sorted(entries, key=lambda entry: entry.timestamp, reverse=True)


def filter_entries_by_date_range(
    entries: Iterable[IncomeEntry],
    date_range: DateRange,
) -> list[IncomeEntry]:
    """Keep entries dated within the range, both ends inclusive."""
    return [entry for entry in entries if date_range.contains(entry.date)]


def _matches(entry: IncomeEntry, income_filter: IncomeFilter) -> bool:
    if income_filter.date_range and not income_filter.date_range.contains(entry.date):
        return False

    if income_filter.categories and entry.category not in income_filter.categories:
        return False

    if income_filter.min_amount is not None and entry.amount < Decimal(income_filter.min_amount):
        return False

    if income_filter.max_amount is not None and entry.amount > Decimal(income_filter.max_amount):
        return False

    if income_filter.search_text:
        if income_filter.search_text.lower() not in entry.description.lower():
            return False

    return True


def filter_entries(
    entries: Iterable[IncomeEntry],
    income_filter: Optional[IncomeFilter] = None,
) -> list[IncomeEntry]:
    """
    Apply a filter to an entry snapshot.

    Args:
        entries: Full entry snapshot
        income_filter: Criteria; None or an empty filter keeps everything

    Returns:
        Matching entries, newest (by timestamp) first
    """
    if income_filter is None or income_filter.is_empty:
        return sort_newest_first(entries)

    return sort_newest_first(
        entry for entry in entries if _matches(entry, income_filter)
    )


def describe_filter(income_filter: Optional[IncomeFilter]) -> str:
    """Human-readable description of a filter, for logs and the UI."""
    if income_filter is None or income_filter.is_empty:
        return "All entries"

    parts = []
    if income_filter.date_range:
        parts.append(
            f"from {income_filter.date_range.start_date.strftime('%d %b %Y')} "
            f"to {income_filter.date_range.end_date.strftime('%d %b %Y')}"
        )
    if income_filter.categories:
        parts.append("category: " + ", ".join(c.value for c in income_filter.categories))
    if income_filter.min_amount is not None:
        parts.append(f"at least {income_filter.min_amount}")
    if income_filter.max_amount is not None:
        parts.append(f"at most {income_filter.max_amount}")
    if income_filter.search_text:
        parts.append(f"matching '{income_filter.search_text}'")
    return " | ".join(parts)
