"""
Storage Services Package

Provides the abstract key-value interface, concrete backends,
and the ledger record stores built on top of them.
"""

from cashflow.services.storage.interface import KeyValueBackend
from cashflow.services.storage.json_file import JSONFileBackend
from cashflow.services.storage.ledger_store import (
    DEFAULT_BALANCE_KEY,
    DEFAULT_ENTRIES_KEY,
    BalanceStore,
    EntryStore,
    LedgerStore,
)
from cashflow.services.storage.memory import InMemoryBackend

__all__ = [
    # Interface
    "KeyValueBackend",
    # Backends
    "InMemoryBackend",
    "JSONFileBackend",
    # Record stores
    "BalanceStore",
    "EntryStore",
    "LedgerStore",
    "DEFAULT_BALANCE_KEY",
    "DEFAULT_ENTRIES_KEY",
]
