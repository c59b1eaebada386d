"""Services package."""

from cashflow.services.storage import (
    BalanceStore,
    EntryStore,
    InMemoryBackend,
    JSONFileBackend,
    KeyValueBackend,
    LedgerStore,
)

__all__ = [
    "BalanceStore",
    "EntryStore",
    "InMemoryBackend",
    "JSONFileBackend",
    "KeyValueBackend",
    "LedgerStore",
]
