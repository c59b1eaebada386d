"""
Abstract Key-Value Storage Interface

DESIGN DECISION: The ledger persists through a tiny async key-value
interface, the same shape as the on-device storage the mobile app used.
This allows us to:
1. Use an in-memory backend for testing
2. Use a single JSON file on disk for local use
3. Swap in a transactional store later without touching ledger logic

Values are strings (JSON text). The backend knows nothing about
balances or entries.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueBackend(ABC):
    """
    Abstract interface for a string key-value store.

    Any storage implementation must implement get/set/remove.
    multi_set has a portable default that is NOT atomic.
    """

    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        """
        Read a value.

        Returns:
            The stored string, or None if the key is absent
        """
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        """
        Write a value, replacing any existing one.

        Raises:
            Any backend exception; the ledger wraps it in StorageError
        """
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        """Delete a key. Removing an absent key is not an error."""
        pass

    async def multi_set(self, items: list[tuple[str, str]]) -> None:
        """
        Write several keys.

        The default writes them one by one, in order. A failure part-way
        leaves the earlier keys written. Backends that can do better
        override this with an atomic write.
        """
        for key, value in items:
            await self.set_item(key, value)

    @property
    def is_transactional(self) -> bool:
        """True if multi_set is all-or-nothing."""
        return False
