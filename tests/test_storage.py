"""Tests for the key-value backends and ledger record stores."""

import asyncio
import json
from datetime import date
from decimal import Decimal

import pytest

from cashflow.config.settings import StorageSettings
from cashflow.models import CashFlowBalance
from cashflow.orchestrator import create_backend, create_ledger
from cashflow.services.storage import (
    DEFAULT_BALANCE_KEY,
    DEFAULT_ENTRIES_KEY,
    InMemoryBackend,
    JSONFileBackend,
    LedgerStore,
)

from tests.factories import make_entry


def make_balance(current="1000") -> CashFlowBalance:
    return CashFlowBalance(
        initial_balance=Decimal("1000"),
        current_balance=Decimal(current),
        last_updated=1,
    )


class RecordingBackend(InMemoryBackend):
    """Remembers the order of set_item calls."""

    def __init__(self):
        super().__init__()
        self.writes: list[str] = []

    async def set_item(self, key: str, value: str) -> None:
        self.writes.append(key)
        await super().set_item(key, value)


class TestInMemoryBackend:
    """Tests for InMemoryBackend."""

    @pytest.mark.asyncio
    async def test_get_set_remove(self):
        """Basic get / set / remove."""
        backend = InMemoryBackend()
        assert await backend.get_item("k") is None

        await backend.set_item("k", "v")
        assert await backend.get_item("k") == "v"

        await backend.remove_item("k")
        await backend.remove_item("k")
        assert await backend.get_item("k") is None

    @pytest.mark.asyncio
    async def test_multi_set_is_sequential(self):
        """The default multi_set writes each key."""
        backend = InMemoryBackend()
        assert backend.is_transactional is False
        await backend.multi_set([("a", "1"), ("b", "2")])
        assert backend.snapshot() == {"a": "1", "b": "2"}


class TestJSONFileBackend:
    """Tests for JSONFileBackend."""

    @pytest.mark.asyncio
    async def test_missing_file_reads_as_empty(self, tmp_path):
        """A missing file reads as an empty namespace."""
        backend = JSONFileBackend(tmp_path / "ledger.json")
        assert await backend.get_item("anything") is None

    @pytest.mark.asyncio
    async def test_values_survive_a_new_instance(self, tmp_path):
        """Values persist across backend instances."""
        path = tmp_path / "nested" / "ledger.json"
        await JSONFileBackend(path).set_item("k", "v")

        assert path.exists()
        assert await JSONFileBackend(path).get_item("k") == "v"

    @pytest.mark.asyncio
    async def test_multi_set_writes_one_document(self, tmp_path):
        """multi_set replaces the file once and leaves no temp files."""
        path = tmp_path / "ledger.json"
        backend = JSONFileBackend(path)
        assert backend.is_transactional is True

        await backend.multi_set([("a", "1"), ("b", "2")])

        assert json.loads(path.read_text(encoding="utf-8")) == {"a": "1", "b": "2"}
        assert [p.name for p in tmp_path.iterdir()] == ["ledger.json"]

    @pytest.mark.asyncio
    async def test_remove_item(self, tmp_path):
        """Removing keys, including absent ones."""
        backend = JSONFileBackend(tmp_path / "ledger.json")
        await backend.multi_set([("a", "1"), ("b", "2")])
        await backend.remove_item("a")
        await backend.remove_item("missing")

        assert await backend.get_item("a") is None
        assert await backend.get_item("b") == "2"

    @pytest.mark.asyncio
    async def test_file_io_runs_in_worker_thread(self, tmp_path, monkeypatch):
        """Reads and writes go through asyncio.to_thread."""
        offloaded = []
        to_thread = asyncio.to_thread

        async def recording_to_thread(func, *args, **kwargs):
            offloaded.append(func.__name__)
            return await to_thread(func, *args, **kwargs)

        monkeypatch.setattr(asyncio, "to_thread", recording_to_thread)
        backend = JSONFileBackend(tmp_path / "ledger.json")

        await backend.set_item("a", "1")
        await backend.multi_set([("b", "2")])
        await backend.remove_item("a")
        assert await backend.get_item("b") == "2"

        assert offloaded == ["_update", "_update", "_update", "_load"]

    @pytest.mark.asyncio
    async def test_non_object_document_is_rejected(self, tmp_path):
        """A file that is not a JSON object is rejected."""
        path = tmp_path / "ledger.json"
        path.write_text("[1, 2, 3]", encoding="utf-8")

        with pytest.raises(ValueError):
            await JSONFileBackend(path).get_item("a")


class TestLedgerStore:
    """Tests for the balance / entries record stores."""

    @pytest.mark.asyncio
    async def test_absent_records(self):
        """Absent records read as None and []."""
        store = LedgerStore(InMemoryBackend())
        assert await store.read_balance() is None
        assert await store.read_entries() == []

    @pytest.mark.asyncio
    async def test_write_pair_writes_entries_first(self):
        """write_pair writes entries, then balance."""
        backend = RecordingBackend()
        store = LedgerStore(backend)

        await store.write_pair(make_balance(), [make_entry("5", date(2024, 1, 1), timestamp=1)])

        assert backend.writes == [DEFAULT_ENTRIES_KEY, DEFAULT_BALANCE_KEY]

    @pytest.mark.asyncio
    async def test_round_trip_keeps_decimals_exact(self):
        """Decimals survive storage exactly."""
        store = LedgerStore(InMemoryBackend())
        entry = make_entry("0.10", date(2024, 1, 1), timestamp=7, balance_after="1000.10")

        await store.write_pair(make_balance("1000.10"), [entry])

        assert await store.read_entries() == [entry]
        assert (await store.read_balance()).current_balance == Decimal("1000.10")

    @pytest.mark.asyncio
    async def test_custom_keys(self):
        """Records use the configured keys."""
        backend = InMemoryBackend()
        store = LedgerStore(backend, balance_key="b", entries_key="e")
        await store.write_pair(make_balance(), [])
        assert set(backend.snapshot()) == {"b", "e"}

    @pytest.mark.asyncio
    async def test_entries_record_must_be_array(self):
        """A non-array entries record is rejected."""
        backend = InMemoryBackend({DEFAULT_ENTRIES_KEY: '{"id": "x"}'})
        with pytest.raises(ValueError):
            await LedgerStore(backend).read_entries()

    @pytest.mark.asyncio
    async def test_reads_camel_case_records(self):
        """Records written by the mobile app load."""
        raw_entries = json.dumps([{
            "id": "abc",
            "amount": "12.50",
            "date": "2024-03-01",
            "description": "Side job",
            "category": "Freelance",
            "timestamp": 1700000000000,
            "balanceAfter": "112.50",
            "isRecurring": True,
            "recurringId": "r-1",
        }])
        store = LedgerStore(InMemoryBackend({DEFAULT_ENTRIES_KEY: raw_entries}))

        [entry] = await store.read_entries()

        assert entry.amount == Decimal("12.50")
        assert entry.balance_after == Decimal("112.50")
        assert entry.is_recurring is True
        assert entry.recurring_id == "r-1"


class TestFactories:
    """Backend and ledger construction from settings."""

    def test_memory_backend_from_settings(self):
        """backend=memory builds an InMemoryBackend."""
        assert isinstance(create_backend(StorageSettings(backend="memory")), InMemoryBackend)

    def test_json_backend_from_settings(self, tmp_path):
        """backend=json builds a JSONFileBackend at the configured path."""
        backend = create_backend(StorageSettings(backend="json", path=tmp_path / "l.json"))
        assert isinstance(backend, JSONFileBackend)
        assert backend.path == tmp_path / "l.json"

    @pytest.mark.asyncio
    async def test_ledger_persists_across_instances(self, tmp_path):
        """A ledger reopened on the same file sees earlier writes."""
        settings = StorageSettings(backend="json", path=tmp_path / "ledger.json")

        first = create_ledger(settings=settings)
        await first.set_initial_balance(1000)
        saved = await first.save_income_entry({
            "amount": 250,
            "date": "2024-01-15",
            "description": "Consulting",
            "category": "Business",
        })

        second = create_ledger(settings=settings)
        balance = await second.get_balance()
        assert balance.current_balance == Decimal("1250")
        assert await second.get_income_entry_by_id(saved.id) == saved
