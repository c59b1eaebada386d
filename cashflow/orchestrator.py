"""
Cash Flow Ledger Facade

This module ties together all the components and is the ONLY public
surface of the ledger. UI screens call these methods and nothing else.

Every mutation follows the same flow:
1. Validate input (before any storage access)
2. Read current state (balance + entries)
3. Apply the change
4. Re-run the running balance over the FULL entry set
5. Persist entries and balance together (write_pair)
6. Return the result

DESIGN DECISION: The ledger owns no module state. The store is passed
in, so every test (and every user profile) gets its own isolated ledger.

Every operation runs inside a storage-operation wrapper:
ledger errors propagate unchanged, anything else the backend raises
is logged and re-raised as StorageError.
"""

import functools
from decimal import Decimal
from typing import Any, Callable, Mapping, Optional

from pydantic import BaseModel
from pydantic import ValidationError as PydanticValidationError

from cashflow.config import get_settings
from cashflow.config.settings import StorageSettings
from cashflow.errors import (
    BalanceNotInitializedError,
    CashFlowError,
    NotFoundError,
    StorageError,
    ValidationError,
)
from cashflow.ledger.clock import MonotonicClock, default_clock
from cashflow.ledger.running_balance import calculate_running_balance
from cashflow.logger import configure_logging, get_logger
from cashflow.models.ledger import (
    CashFlowBalance,
    CashFlowSummary,
    DateRange,
    IncomeEntry,
    IncomeFilter,
)
from cashflow.queries.filters import describe_filter, filter_entries
from cashflow.services.storage import (
    InMemoryBackend,
    JSONFileBackend,
    KeyValueBackend,
    LedgerStore,
)
from cashflow.summaries.engine import SummaryEngine
from cashflow.validation import (
    validate_amount,
    validate_income_entry,
    validate_income_update,
    validate_period,
)


def storage_operation(operation: str) -> Callable:
    """
    Wrap a ledger coroutine so backend failures surface as StorageError.

    CashFlowError subclasses (validation, not found, not initialized)
    pass through untouched.
    """
    def decorator(func):
        @functools.wraps(func)
        async def wrapper(self, *args, **kwargs):
            try:
                return await func(self, *args, **kwargs)
            except CashFlowError:
                raise
            except Exception as e:
                self._logger.error(
                    "storage_operation_failed",
                    operation=operation,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise StorageError(operation, e) from e
        return wrapper
    return decorator


def _as_mapping(value: Any, field: str) -> Mapping[str, Any]:
    if isinstance(value, BaseModel):
        return value.model_dump(exclude_unset=True)
    if not isinstance(value, Mapping):
        raise ValidationError(field, "Must be a mapping of field names to values")
    return value


def _coerce_model(model_cls, value: Any, field: str):
    """Build a query model from a model or mapping, as a ValidationError on failure."""
    if value is None or isinstance(value, model_cls):
        return value
    try:
        return model_cls.model_validate(_as_mapping(value, field))
    except PydanticValidationError as e:
        reason = "; ".join(error["msg"] for error in e.errors())
        raise ValidationError(field, reason) from e


class CashFlowLedger:
    """
    Orchestrates every ledger operation.

    GUARANTEES:
    - Validation failures never touch storage
    - After any create/update/delete,
      current_balance == initial_balance + sum(entry amounts)
    - Every balance_after matches a prefix sum in (date, timestamp) order
    """

    def __init__(
        self,
        store: LedgerStore,
        clock: Optional[MonotonicClock] = None,
    ):
        self._store = store
        self._clock = clock or default_clock
        self._summaries = SummaryEngine(store)
        self._logger = get_logger("cashflow.ledger")

    @property
    def store(self) -> LedgerStore:
        return self._store

    async def _require_balance(self) -> CashFlowBalance:
        balance = await self._store.read_balance()
        if balance is None:
            raise BalanceNotInitializedError()
        return balance

    def _find_entry(self, entries: list[IncomeEntry], entry_id: str) -> int:
        for index, entry in enumerate(entries):
            if entry.id == entry_id:
                return index
        raise NotFoundError("Income entry", entry_id)

    async def _commit(
        self,
        balance: CashFlowBalance,
        entries: list[IncomeEntry],
        last_entry_id: Optional[str] = None,
    ) -> tuple[CashFlowBalance, list[IncomeEntry]]:
        """Recompute running balance over all entries and persist the pair."""
        result = calculate_running_balance(balance.initial_balance, entries)

        update: dict[str, Any] = {
            "current_balance": result.current_balance,
            "total_income": result.total_income,
            "last_updated": self._clock(),
        }
        if last_entry_id is not None:
            update["last_entry_id"] = last_entry_id
        updated_balance = balance.model_copy(update=update)

        await self._store.write_pair(updated_balance, result.entries)
        return updated_balance, result.entries

    # =========================================================================
    # BALANCE
    # =========================================================================

    @storage_operation("setInitialBalance")
    async def set_initial_balance(self, amount: Any) -> CashFlowBalance:
        """
        Create the balance record (first-time setup).

        WARNING: If a balance already exists it is overwritten, not
        merged. This is the only re-initialization path and belongs to
        the setup flow. Existing entries are kept; the next mutation or
        recalculate_balance() re-anchors them to the new initial balance.
        """
        initial = validate_amount(amount)

        existing = await self._store.read_balance()
        if existing is not None:
            entry_count = len(await self._store.read_entries())
            self._logger.warning(
                "initial_balance_overwritten",
                previous_initial_balance=str(existing.initial_balance),
                new_initial_balance=str(initial),
                entry_count=entry_count,
            )

        balance = CashFlowBalance(
            initial_balance=initial,
            current_balance=initial,
            total_income=Decimal("0"),
            total_expenses=Decimal("0"),
            last_updated=self._clock(),
        )
        await self._store.write_balance(balance)

        self._logger.info("initial_balance_set", initial_balance=str(initial))
        return balance

    @storage_operation("getBalance")
    async def get_balance(self) -> CashFlowBalance:
        """
        Return the balance record.

        Raises:
            BalanceNotInitializedError: No setup yet. The UI routes
                                        first-time users on this.
        """
        return await self._require_balance()

    @storage_operation("recalculateBalance")
    async def recalculate_balance(self) -> CashFlowBalance:
        """
        Rebuild the balance and every balance_after from the stored entries.

        This is the repair path after an interrupted write: entries are
        the source of truth, the balance is a cache.
        """
        balance = await self._require_balance()
        entries = await self._store.read_entries()
        updated, _ = await self._commit(balance, entries)

        if updated.current_balance != balance.current_balance:
            self._logger.warning(
                "balance_repaired",
                cached_balance=str(balance.current_balance),
                recomputed_balance=str(updated.current_balance),
            )
        self._logger.info(
            "balance_recalculated",
            current_balance=str(updated.current_balance),
            entry_count=len(entries),
        )
        return updated

    # =========================================================================
    # ENTRIES
    # =========================================================================

    @storage_operation("saveIncomeEntry")
    async def save_income_entry(self, draft: Any) -> IncomeEntry:
        """
        Record a new income entry.

        Args:
            draft: amount, date, description, category
                   (+ optional is_recurring / recurring_id)

        Returns:
            The stored entry, with its id, timestamp and balance_after
        """
        fields = validate_income_entry(_as_mapping(draft, "entry"))

        balance = await self._require_balance()
        entries = await self._store.read_entries()

        # Keep new timestamps after anything already stored
        if entries:
            self._clock.advance_past(max(entry.timestamp for entry in entries))

        new_entry = IncomeEntry(timestamp=self._clock(), **fields)
        _, updated_entries = await self._commit(
            balance,
            [*entries, new_entry],
            last_entry_id=new_entry.id,
        )

        saved = next(entry for entry in updated_entries if entry.id == new_entry.id)
        self._logger.info(
            "income_entry_saved",
            entry_id=saved.id,
            amount=str(saved.amount),
            date=saved.date.isoformat(),
            category=saved.category.value,
            balance_after=str(saved.balance_after),
        )
        return saved

    @storage_operation("getIncomeEntries")
    async def get_income_entries(self, income_filter: Any = None) -> list[IncomeEntry]:
        """
        List entries, newest first, optionally filtered.

        NOTE: The order is by creation timestamp, not the
        chronological order the running balance uses.
        """
        income_filter = _coerce_model(IncomeFilter, income_filter, "filter")
        entries = filter_entries(await self._store.read_entries(), income_filter)
        self._logger.debug(
            "income_entries_listed",
            filter=describe_filter(income_filter),
            result_count=len(entries),
        )
        return entries

    @storage_operation("getIncomeEntryById")
    async def get_income_entry_by_id(self, entry_id: str) -> Optional[IncomeEntry]:
        """Return one entry, or None if the id is unknown."""
        for entry in await self._store.read_entries():
            if entry.id == entry_id:
                return entry
        return None

    @storage_operation("updateIncomeEntry")
    async def update_income_entry(self, entry_id: str, updates: Any) -> IncomeEntry:
        """
        Change some fields of an entry.

        Only the supplied fields are validated and replaced.
        id, timestamp and balance_after cannot be changed.

        Raises:
            NotFoundError: No entry with this id
        """
        fields = validate_income_update(_as_mapping(updates, "updates"))

        entries = await self._store.read_entries()
        index = self._find_entry(entries, entry_id)
        balance = await self._require_balance()

        entries[index] = entries[index].model_copy(update=fields)
        _, updated_entries = await self._commit(balance, entries)

        updated = next(entry for entry in updated_entries if entry.id == entry_id)
        self._logger.info(
            "income_entry_updated",
            entry_id=entry_id,
            fields=sorted(fields),
            balance_after=str(updated.balance_after),
        )
        return updated

    @storage_operation("deleteIncomeEntry")
    async def delete_income_entry(self, entry_id: str) -> None:
        """
        Remove an entry and recompute the running balance.

        Raises:
            NotFoundError: No entry with this id
        """
        entries = await self._store.read_entries()
        index = self._find_entry(entries, entry_id)
        balance = await self._require_balance()

        removed = entries.pop(index)
        if balance.last_entry_id == entry_id:
            # Point at the newest remaining entry, or nothing
            newest = max(entries, key=lambda entry: entry.timestamp, default=None)
            balance = balance.model_copy(
                update={"last_entry_id": newest.id if newest else None}
            )
        updated_balance, _ = await self._commit(balance, entries)

        self._logger.info(
            "income_entry_deleted",
            entry_id=entry_id,
            amount=str(removed.amount),
            current_balance=str(updated_balance.current_balance),
        )

    # =========================================================================
    # SUMMARIES
    # =========================================================================

    @storage_operation("getMonthlySummary")
    async def get_monthly_summary(self, year: int, month: int) -> CashFlowSummary:
        validate_period(year, month)
        return await self._summaries.monthly(year, month)

    @storage_operation("getYearlySummary")
    async def get_yearly_summary(self, year: int) -> CashFlowSummary:
        validate_period(year)
        return await self._summaries.yearly(year)

    @storage_operation("getCustomSummary")
    async def get_custom_summary(self, date_range: Any) -> CashFlowSummary:
        """Summary over an arbitrary inclusive date range."""
        date_range = _coerce_model(DateRange, date_range, "date_range")
        if date_range is None:
            raise ValidationError("date_range", "Is required")
        return await self._summaries.custom(date_range)


def create_backend(settings: Optional[StorageSettings] = None) -> KeyValueBackend:
    """Build the configured key-value backend."""
    settings = settings or get_settings().storage
    if settings.backend == "memory":
        return InMemoryBackend()
    return JSONFileBackend(settings.path)


def create_ledger(
    backend: Optional[KeyValueBackend] = None,
    settings: Optional[StorageSettings] = None,
    clock: Optional[MonotonicClock] = None,
) -> CashFlowLedger:
    """
    Factory function to create a ready-to-use ledger.

    Args:
        backend: Key-value backend. Built from settings if None.
        settings: Storage settings. Loaded from the environment if None.
        clock: Timestamp source, mainly for tests.

    Returns:
        A CashFlowLedger over the configured store
    """
    configure_logging()
    settings = settings or get_settings().storage
    backend = backend or create_backend(settings)
    store = LedgerStore(
        backend,
        balance_key=settings.balance_key,
        entries_key=settings.entries_key,
    )
    return CashFlowLedger(store, clock=clock)
