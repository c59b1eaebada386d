"""Entry query package."""

from cashflow.queries.filters import (
    describe_filter,
    filter_entries,
    filter_entries_by_date_range,
    sort_newest_first,
)

__all__ = [
    "describe_filter",
    "filter_entries",
    "filter_entries_by_date_range",
    "sort_newest_first",
]
