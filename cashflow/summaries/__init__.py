"""Period summary package."""

from cashflow.summaries.engine import (
    SummaryEngine,
    build_summary,
    calculate_trend,
    month_range,
    preceding_range,
    previous_month,
    year_range,
)

__all__ = [
    "SummaryEngine",
    "build_summary",
    "calculate_trend",
    "month_range",
    "preceding_range",
    "previous_month",
    "year_range",
]
