"""Shared fixtures: isolated in-memory ledgers with a deterministic clock."""

from typing import Optional

import pytest

from cashflow.ledger.clock import MonotonicClock
from cashflow.orchestrator import CashFlowLedger
from cashflow.services.storage import InMemoryBackend, LedgerStore


START_MS = 1_700_000_000_000


class FailingBackend(InMemoryBackend):
    """In-memory backend that can be told to fail reads or writes."""

    def __init__(self):
        super().__init__()
        self.fail_reads = False
        self.fail_write_keys: set[str] = set()
        self.writes: list[str] = []

    async def get_item(self, key: str) -> Optional[str]:
        if self.fail_reads:
            raise OSError("disk unavailable")
        return await super().get_item(key)

    async def set_item(self, key: str, value: str) -> None:
        if key in self.fail_write_keys:
            raise OSError(f"write to {key} failed")
        self.writes.append(key)
        await super().set_item(key, value)


@pytest.fixture
def clock():
    """Clock frozen at START_MS; each reading is 1 ms after the last."""
    return MonotonicClock(source=lambda: START_MS)


@pytest.fixture
def backend():
    return InMemoryBackend()


@pytest.fixture
def store(backend):
    return LedgerStore(backend)


@pytest.fixture
def ledger(store, clock):
    return CashFlowLedger(store, clock=clock)


@pytest.fixture
def failing_backend():
    return FailingBackend()


@pytest.fixture
def failing_ledger(failing_backend, clock):
    return CashFlowLedger(LedgerStore(failing_backend), clock=clock)

