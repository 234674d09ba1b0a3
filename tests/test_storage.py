"""Tests for entry storage and store backends."""

import asyncio
from pathlib import Path

import pytest

from digestigo.exceptions import StaleSessionError, StorageReadError, StorageWriteError
from digestigo.models import Category, FoodCategory, NewEntry
from digestigo.services import EntryStore, MemoryStore, TinyDBStore

from conftest import BrokenStore, run


def new_entry(category=Category.SYMPTOM, summary="Experiencing bloating", **kwargs):
    return NewEntry(category=category, message="msg", summary=summary, **kwargs)


class YieldingStore(MemoryStore):
    """Suspends on every call so concurrent appends interleave."""

    async def get(self, key):
        await asyncio.sleep(0)
        return await super().get(key)

    async def set(self, key, value):
        await asyncio.sleep(0)
        await super().set(key, value)


class TestEntryStore:
    """Tests for EntryStore."""

    def test_append_and_all(self, entry_store):
        """Test entries come back in insertion order."""
        first = run(entry_store.append(new_entry(summary="A")))
        second = run(entry_store.append(new_entry(Category.DIETARY, "B", food_category=FoodCategory.DAIRY)))

        entries = run(entry_store.all())
        assert [e.id for e in entries] == [first.id, second.id]
        assert entries[1].food_category == FoodCategory.DAIRY

    def test_duplicate_is_skipped(self, entry_store):
        """Test the same (category, summary) pair is stored once."""
        assert run(entry_store.append(new_entry())) is not None
        assert run(entry_store.append(new_entry())) is None
        assert len(run(entry_store.all())) == 1

    def test_same_summary_other_category_is_kept(self, entry_store):
        run(entry_store.append(new_entry(Category.SYMPTOM, "Bloating")))
        assert run(entry_store.append(new_entry(Category.TRIGGER, "Bloating"))) is not None

    def test_persists_as_json_array(self, memory_store, entry_store):
        run(entry_store.append(new_entry()))
        raw = memory_store.data["tracking_entries"]
        assert raw.startswith("[")
        assert '"category":"symptom"' in raw

    def test_reload_from_store(self, memory_store, entry_store):
        """Test a second EntryStore on the same backend sees the entries."""
        run(entry_store.append(new_entry()))
        assert len(run(EntryStore(memory_store).all())) == 1

    def test_clear(self, entry_store):
        run(entry_store.append(new_entry()))
        run(entry_store.clear())

        assert run(entry_store.all()) == []
        assert entry_store.generation == 1

    def test_stale_generation_refused(self, entry_store):
        generation = entry_store.generation
        run(entry_store.clear())

        with pytest.raises(StaleSessionError):
            run(entry_store.append(new_entry(), expected_generation=generation))
        assert run(entry_store.all()) == []

    def test_concurrent_duplicates_write_once(self):
        """Test concurrent identical appends produce a single entry."""
        store = EntryStore(YieldingStore())

        async def append_many():
            return await asyncio.gather(*(store.append(new_entry()) for _ in range(5)))

        results = run(append_many())
        assert sum(r is not None for r in results) == 1
        assert len(run(store.all())) == 1

    def test_corrupt_data_reads_empty(self):
        """Test all() degrades to an empty list on unreadable data."""
        store = EntryStore(MemoryStore({"tracking_entries": "{not json"}))
        assert run(store.all()) == []

    def test_corrupt_data_blocks_append(self):
        store = EntryStore(MemoryStore({"tracking_entries": "{not json"}))
        with pytest.raises(StorageReadError):
            run(store.append(new_entry()))

    def test_write_failure_propagates(self):
        store = EntryStore(BrokenStore())
        with pytest.raises(StorageWriteError):
            run(store.append(new_entry()))
        with pytest.raises(StorageWriteError):
            run(store.clear())
        assert store.generation == 0


class TestTinyDBStore:
    """Tests for the TinyDB backend."""

    def test_get_set_remove(self, tmp_path: Path):
        with TinyDBStore(tmp_path / "db.json") as store:
            assert run(store.get("k")) is None
            run(store.set("k", "v1"))
            run(store.set("k", "v2"))
            assert run(store.get("k")) == "v2"
            run(store.remove("k"))
            assert run(store.get("k")) is None

    def test_entry_store_on_tinydb(self, tmp_path: Path):
        path = tmp_path / "nested" / "db.json"
        with TinyDBStore(path) as backend:
            run(EntryStore(backend).append(new_entry()))

        with TinyDBStore(path) as backend:
            entries = run(EntryStore(backend).all())
        assert [e.summary for e in entries] == ["Experiencing bloating"]

    def test_corrupt_file(self, tmp_path: Path):
        path = tmp_path / "db.json"
        path.write_text("garbage", encoding="utf-8")

        with TinyDBStore(path) as store:
            with pytest.raises(StorageReadError):
                run(store.get("k"))
            assert run(EntryStore(store).all()) == []

    def test_close_releases_database(self, tmp_path: Path):
        """Test close() shuts the file even when only the kv table has data."""
        store = TinyDBStore(tmp_path / "db.json")
        run(store.set("k", "v"))
        db = store.db

        store.close()

        assert store._db is None
        assert db._opened is False
        with TinyDBStore(tmp_path / "db.json") as reopened:
            assert run(reopened.get("k")) == "v"
