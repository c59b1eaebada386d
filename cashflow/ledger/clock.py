"""Creation timestamps for ledger entries."""

import time
from typing import Callable, Optional


class MonotonicClock:
    """
    Epoch-millisecond clock that never repeats or goes backwards.

    Two entries created in the same millisecond still get distinct,
    ordered timestamps, which the running balance relies on to
    order same-date entries.
    """

    def __init__(self, source: Optional[Callable[[], int]] = None):
        self._source = source or (lambda: time.time_ns() // 1_000_000)
        self._last = 0

    def __call__(self) -> int:
        now = self._source()
        if now <= self._last:
            now = self._last + 1
        self._last = now
        return now

    def advance_past(self, timestamp: int) -> None:
        """Make sure the next reading is later than `timestamp`."""
        if timestamp > self._last:
            self._last = timestamp


# One clock per process
default_clock = MonotonicClock()
