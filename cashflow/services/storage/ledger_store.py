"""
Ledger Record Stores

Two records live in the key-value namespace:
- the balance record: one JSON object (CashFlowBalance)
- the entries record: one JSON array (IncomeEntry)

BalanceStore and EntryStore each own one record. LedgerStore groups
them and adds write_pair, the only way the ledger writes after a
mutation.

IMPORTANT: Entries are the source of truth, the balance is a cache.
write_pair always writes entries FIRST, so if a non-transactional
backend fails between the two writes, recomputing from the stored
entries restores consistency.
"""

import json
from typing import Optional

from cashflow.models.ledger import CashFlowBalance, IncomeEntry
from cashflow.services.storage.interface import KeyValueBackend


DEFAULT_BALANCE_KEY = "@cashflow_balance"
DEFAULT_ENTRIES_KEY = "@cashflow_income_entries"


def _encode_balance(balance: CashFlowBalance) -> str:
    return json.dumps(balance.to_json_dict())


def _encode_entries(entries: list[IncomeEntry]) -> str:
    return json.dumps([entry.to_json_dict() for entry in entries])


class BalanceStore:
    """Holds the single CashFlowBalance record."""

    def __init__(self, backend: KeyValueBackend, key: str = DEFAULT_BALANCE_KEY):
        self._backend = backend
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def read(self) -> Optional[CashFlowBalance]:
        """Return the balance, or None if it was never initialized."""
        raw = await self._backend.get_item(self._key)
        if not raw:
            return None
        return CashFlowBalance.model_validate_json(raw)

    async def write(self, balance: CashFlowBalance) -> None:
        await self._backend.set_item(self._key, _encode_balance(balance))


class EntryStore:
    """Holds the IncomeEntry collection."""

    def __init__(self, backend: KeyValueBackend, key: str = DEFAULT_ENTRIES_KEY):
        self._backend = backend
        self._key = key

    @property
    def key(self) -> str:
        return self._key

    async def read_all(self) -> list[IncomeEntry]:
        """All stored entries, in stored order. Empty if none yet."""
        raw = await self._backend.get_item(self._key)
        if not raw:
            return []
        data = json.loads(raw)
        if not isinstance(data, list):
            raise ValueError(f"Entries record '{self._key}' is not a JSON array")
        return [IncomeEntry.model_validate(item) for item in data]

    async def write_all(self, entries: list[IncomeEntry]) -> None:
        await self._backend.set_item(self._key, _encode_entries(entries))


class LedgerStore:
    """
    Balance + entries, written together.

    On a transactional backend write_pair is atomic. Otherwise it is
    two sequential writes, entries then balance.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        balance_key: str = DEFAULT_BALANCE_KEY,
        entries_key: str = DEFAULT_ENTRIES_KEY,
    ):
        self._backend = backend
        self.balances = BalanceStore(backend, balance_key)
        self.entries = EntryStore(backend, entries_key)

    @property
    def backend(self) -> KeyValueBackend:
        return self._backend

    async def read_balance(self) -> Optional[CashFlowBalance]:
        return await self.balances.read()

    async def read_entries(self) -> list[IncomeEntry]:
        return await self.entries.read_all()

    async def write_balance(self, balance: CashFlowBalance) -> None:
        await self.balances.write(balance)

    async def write_pair(
        self,
        balance: CashFlowBalance,
        entries: list[IncomeEntry],
    ) -> None:
        """Persist entries and balance as one logical write."""
        await self._backend.multi_set([
            (self.entries.key, _encode_entries(entries)),
            (self.balances.key, _encode_balance(balance)),
        ])
