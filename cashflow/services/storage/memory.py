"""In-memory key-value backend, for tests and throwaway sessions."""

from typing import Optional

from cashflow.services.storage.interface import KeyValueBackend


class InMemoryBackend(KeyValueBackend):
    """
    Dict-backed store. Nothing survives the process.

    Uses the default, sequential multi_set so tests see the
    same write ordering as a non-transactional device store.
    """

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._data: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._data[key] = value

    async def remove_item(self, key: str) -> None:
        self._data.pop(key, None)

    def snapshot(self) -> dict[str, str]:
        """Copy of the raw stored strings."""
        return dict(self._data)
