"""
Period Summary Engine

Computes month / year / custom-range aggregates on demand from the
stored entries and balance. Summaries are never persisted.

DESIGN DECISION: The trend compares this period's net cash flow with
the immediately preceding period's. The previous period is computed
with the basic totals ONLY; it never computes its own trend. A yearly
summary therefore reads exactly two years, not every earlier year.

Trend is the one place a failure is swallowed: if the previous period
cannot be resolved or read, the trend is 0 and the failure is logged.
"""

import calendar
from datetime import date, timedelta
from decimal import ROUND_HALF_UP, Decimal
from typing import Callable, Optional

from cashflow.errors import BalanceNotInitializedError
from cashflow.ledger.running_balance import sort_chronologically
from cashflow.logger import get_logger
from cashflow.models.ledger import (
    CashFlowBalance,
    CashFlowSummary,
    DateRange,
    IncomeCategory,
    IncomeEntry,
    PeriodType,
)
from cashflow.queries.filters import filter_entries_by_date_range
from cashflow.services.storage.ledger_store import LedgerStore


ZERO = Decimal("0")
CENTS = Decimal("0.01")
HUNDRED = Decimal("100")


# =============================================================================
# PERIOD ARITHMETIC
# =============================================================================

def month_range(year: int, month: int) -> DateRange:
    """First to last calendar day of the month."""
    last_day = calendar.monthrange(year, month)[1]
    return DateRange(
        start_date=date(year, month, 1),
        end_date=date(year, month, last_day),
    )


def year_range(year: int) -> DateRange:
    """Jan 1 to Dec 31."""
    return DateRange(start_date=date(year, 1, 1), end_date=date(year, 12, 31))


def previous_month(year: int, month: int) -> tuple[int, int]:
    """The month before, wrapping January back to December."""
    if month == 1:
        return year - 1, 12
    return year, month - 1


def preceding_range(date_range: DateRange) -> DateRange:
    """Window of equal length ending the day before `date_range` starts."""
    length = date_range.end_date - date_range.start_date
    end = date_range.start_date - timedelta(days=1)
    return DateRange(start_date=end - length, end_date=end)


def period_label(period_type: PeriodType, date_range: DateRange) -> str:
    if period_type == PeriodType.MONTH:
        return date_range.start_date.strftime("%Y-%m")
    if period_type == PeriodType.YEAR:
        return f"{date_range.start_date.year:04d}"
    return f"{date_range.start_date.isoformat()}..{date_range.end_date.isoformat()}"


# =============================================================================
# AGGREGATION
# =============================================================================

def net_cash_flow(entries: list[IncomeEntry]) -> Decimal:
    """Income minus expenses. Expenses are always zero."""
    total_income = sum((entry.amount for entry in entries), ZERO)
    total_expenses = ZERO
    return total_income - total_expenses


def category_breakdown(entries: list[IncomeEntry]) -> dict[IncomeCategory, Decimal]:
    """Sum per category; only categories that occur appear."""
    breakdown: dict[IncomeCategory, Decimal] = {}
    for entry in entries:
        breakdown[entry.category] = breakdown.get(entry.category, ZERO) + entry.amount
    return breakdown


def calculate_trend(current_net: Decimal, previous_net: Decimal) -> Decimal:
    """Percent change. A zero previous period gives 0, not a division error."""
    if previous_net == 0:
        return ZERO
    change = (current_net - previous_net) / previous_net * HUNDRED
    return change.quantize(CENTS, rounding=ROUND_HALF_UP)


def build_summary(
    period_type: PeriodType,
    date_range: DateRange,
    entries: list[IncomeEntry],
    balance: CashFlowBalance,
    previous_net: Optional[Decimal] = None,
) -> CashFlowSummary:
    """
    Aggregate an already-filtered entry list.

    Args:
        period_type: Month, year or custom
        date_range: The period's inclusive range (for the label)
        entries: Entries inside the period
        balance: Current balance, for the empty-period fallback
        previous_net: Net cash flow of the preceding period,
                      None when it is unknown (trend 0)
    """
    total_income = sum((entry.amount for entry in entries), ZERO)
    total_expenses = ZERO
    net = total_income - total_expenses
    entry_count = len(entries)

    if entry_count:
        average_income = (total_income / entry_count).quantize(CENTS, rounding=ROUND_HALF_UP)
    else:
        average_income = ZERO

    # Balance immediately before the first entry of the period
    ordered = sort_chronologically(entries)
    if ordered and ordered[0].balance_after is not None:
        start_balance = ordered[0].balance_after - ordered[0].amount
    else:
        start_balance = balance.current_balance - total_income
    end_balance = start_balance + net

    trend = ZERO if previous_net is None else calculate_trend(net, previous_net)

    return CashFlowSummary(
        period=period_label(period_type, date_range),
        period_type=period_type,
        total_income=total_income,
        total_expenses=total_expenses,
        net_cash_flow=net,
        entry_count=entry_count,
        average_income=average_income,
        start_balance=start_balance,
        end_balance=end_balance,
        category_breakdown=category_breakdown(entries),
        trend=trend,
    )


# =============================================================================
# ENGINE
# =============================================================================

class SummaryEngine:
    """
    Computes period summaries against a ledger store.

    GUARANTEES:
    - Fails with BalanceNotInitializedError before setup
    - Never recurses into the previous period's trend
    - Trend is 0 when the previous period is empty or unreadable
    """

    def __init__(self, store: LedgerStore):
        self._store = store
        self._logger = get_logger("cashflow.summaries")

    async def monthly(self, year: int, month: int) -> CashFlowSummary:
        prev_year, prev_month = previous_month(year, month)
        return await self._summarize(
            PeriodType.MONTH,
            month_range(year, month),
            lambda: month_range(prev_year, prev_month),
        )

    async def yearly(self, year: int) -> CashFlowSummary:
        return await self._summarize(
            PeriodType.YEAR,
            year_range(year),
            lambda: year_range(year - 1),
        )

    async def custom(self, date_range: DateRange) -> CashFlowSummary:
        return await self._summarize(
            PeriodType.CUSTOM,
            date_range,
            lambda: preceding_range(date_range),
        )

    async def _read_balance(self) -> CashFlowBalance:
        balance = await self._store.read_balance()
        if balance is None:
            raise BalanceNotInitializedError()
        return balance

    async def _summarize(
        self,
        period_type: PeriodType,
        date_range: DateRange,
        previous_range: Callable[[], DateRange],
    ) -> CashFlowSummary:
        balance = await self._read_balance()
        entries = filter_entries_by_date_range(
            await self._store.read_entries(), date_range
        )
        previous_net = await self._previous_net(period_type, previous_range)
        return build_summary(period_type, date_range, entries, balance, previous_net)

    async def _previous_net(
        self,
        period_type: PeriodType,
        previous_range: Callable[[], DateRange],
    ) -> Optional[Decimal]:
        """Net cash flow of the preceding period, or None if unavailable."""
        try:
            date_range = previous_range()
            entries = filter_entries_by_date_range(
                await self._store.read_entries(), date_range
            )
        except Exception as e:
            # No prior data, trend stays 0
            self._logger.warning(
                "summary_trend_unavailable",
                period_type=period_type.value,
                error=str(e),
            )
            return None
        return net_cash_flow(entries)
