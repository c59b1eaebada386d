"""
JSON File Storage Implementation

DESIGN DECISION: A single JSON document on disk holds the whole
key-value namespace, {key: value_string}. This is used as the local
backend because:
1. No database setup required
2. The user can open and read the file
3. Writing the whole document lets multi_set be atomic

TRADEOFFS:
- Every write rewrites the file (fine for a personal ledger)
- One process at a time; there is no file locking

File reads and writes run in a worker thread (asyncio.to_thread) so the
event loop is not blocked on disk I/O.

Atomicity comes from writing a temporary file next to the target
and renaming it over the target. A crash leaves either the old or the
new document, never a mix.
"""

import asyncio
import json
import os
import tempfile
from pathlib import Path
from typing import Optional

from cashflow.services.storage.interface import KeyValueBackend


class JSONFileBackend(KeyValueBackend):
    """Key-value namespace persisted as one JSON file."""

    def __init__(self, path: Path | str):
        self._path = Path(path).expanduser()

    @property
    def path(self) -> Path:
        return self._path

    @property
    def is_transactional(self) -> bool:
        return True

    def _load(self) -> dict[str, str]:
        if not self._path.exists():
            return {}
        with self._path.open("r", encoding="utf-8") as handle:
            data = json.load(handle)
        if not isinstance(data, dict):
            raise ValueError(f"Storage file {self._path} does not contain a JSON object")
        return data

    def _dump(self, data: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=self._path.parent,
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                json.dump(data, handle, indent=2, sort_keys=True)
                handle.flush()
                os.fsync(handle.fileno())
            os.replace(tmp_name, self._path)
        except BaseException:
            if os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise

    def _update(self, items: list[tuple[str, str]], removed: tuple[str, ...] = ()) -> None:
        """Apply writes and removals with one load and at most one dump."""
        data = self._load()
        for key, value in items:
            data[key] = value
        changed = bool(items)
        for key in removed:
            if key in data:
                del data[key]
                changed = True
        if changed:
            self._dump(data)

    async def get_item(self, key: str) -> Optional[str]:
        data = await asyncio.to_thread(self._load)
        return data.get(key)

    async def set_item(self, key: str, value: str) -> None:
        await asyncio.to_thread(self._update, [(key, value)])

    async def remove_item(self, key: str) -> None:
        await asyncio.to_thread(self._update, [], (key,))

    async def multi_set(self, items: list[tuple[str, str]]) -> None:
        """All keys land in one file replace, or none do."""
        await asyncio.to_thread(self._update, list(items))
