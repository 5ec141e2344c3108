"""Tests for TableStore."""

import asyncio
import logging
import threading
from unittest.mock import MagicMock

import pytest

from tabkey.models import TranspositionTable
from tabkey.services.tables import LoadError, TableStore
from tabkey.sources import DocumentStoreError


class TestTableStoreLoad:
    """Tests for TableStore.load."""

    def test_load_parses_tables(self, table_source):
        """Loaded store holds parsed tables in source order."""
        store = TableStore(table_source)
        store.load()

        assert store.is_loaded
        assert store.table_count == 12
        assert isinstance(store.tables[0], TranspositionTable)
        assert [t.id for t in store.tables][:3] == ["table_0", "table_1", "table_2"]
        assert store.error is None

    def test_load_skips_when_already_loaded(self):
        """A second load without force_reload doesn't fetch again."""
        source = MagicMock()
        source.fetch_tables.return_value = [{"_id": "t1"}]
        store = TableStore(source)

        store.load()
        store.load()

        assert source.fetch_tables.call_count == 1

    def test_force_reload_fetches_again(self):
        """force_reload replaces the tables."""
        source = MagicMock()
        source.fetch_tables.side_effect = [[{"_id": "t1"}], [{"_id": "t2"}, {"_id": "t3"}]]
        store = TableStore(source)

        store.load()
        store.load(force_reload=True)

        assert store.table_count == 2
        assert store.get_by_index(0).id == "t2"

    def test_empty_result_raises_load_error(self):
        """No tables is a load failure and leaves the store not loaded."""
        source = MagicMock()
        source.fetch_tables.return_value = []
        store = TableStore(source)

        with pytest.raises(LoadError, match="No transposition tables"):
            store.load()

        assert not store.is_loaded
        assert store.error == "No transposition tables found"
        assert not store.is_loading

    def test_source_error_wrapped(self):
        """Source failures surface as LoadError."""
        source = MagicMock()
        source.fetch_tables.side_effect = DocumentStoreError("Cannot connect")
        store = TableStore(source)

        with pytest.raises(LoadError, match="Cannot connect"):
            store.load()

        assert not store.is_loaded

    def test_failed_reload_keeps_previous_tables(self, table_source):
        """A failed forced reload doesn't discard loaded tables."""
        store = TableStore(table_source)
        store.load()
        store.source = MagicMock()
        store.source.fetch_tables.return_value = []

        with pytest.raises(LoadError):
            store.load(force_reload=True)

        assert store.is_loaded
        assert store.table_count == 12

    def test_fewer_than_twelve_tolerated(self, table_documents, caplog):
        """Partial table sets load with a warning."""
        source = MagicMock()
        source.fetch_tables.return_value = table_documents[:5]
        store = TableStore(source)

        with caplog.at_level(logging.WARNING, logger="tabkey"):
            store.load()

        assert store.is_loaded
        assert store.table_count == 5
        assert "5 of 12" in caplog.text

    def test_malformed_document_raises_load_error(self):
        """Non-dict documents are reported as LoadError."""
        source = MagicMock()
        source.fetch_tables.return_value = ["not a table"]
        store = TableStore(source)

        with pytest.raises(LoadError, match="Malformed"):
            store.load()


class TestTableStoreAsyncLoad:
    """Tests for TableStore.aload."""

    def test_aload_loads_tables(self, table_source):
        """aload fills the store like load."""
        store = TableStore(table_source)

        asyncio.run(store.aload())

        assert store.is_loaded
        assert store.table_count == 12

    def test_aload_error(self):
        """aload raises LoadError on empty results."""
        source = MagicMock()
        source.fetch_tables.return_value = None
        store = TableStore(source)

        with pytest.raises(LoadError):
            asyncio.run(store.aload())

    def test_cancelled_aload_leaves_store_unloaded(self, table_documents):
        """Cancelling during the fetch never commits tables."""
        release = threading.Event()

        class SlowSource:
            def fetch_tables(self):
                release.wait(timeout=5)
                return table_documents

        store = TableStore(SlowSource())

        async def run():
            task = asyncio.create_task(store.aload())
            await asyncio.sleep(0.05)
            task.cancel()
            with pytest.raises(asyncio.CancelledError):
                await task
            release.set()

        asyncio.run(run())

        assert not store.is_loaded
        assert store.table_count == 0
        assert not store.is_loading


class TestTableStoreLookups:
    """Tests for bounds-safe lookups."""

    def test_get_by_index(self, table_store):
        assert table_store.get_by_index(0).id == "table_0"
        assert table_store.get_by_index(11).id == "table_11"

    def test_get_by_index_out_of_range(self, table_store):
        """Out-of-range indexes return None."""
        assert table_store.get_by_index(12) is None
        assert table_store.get_by_index(-1) is None

    def test_get_index_by_id(self, table_store):
        assert table_store.get_index_by_id("table_7") == 7

    def test_get_index_by_unknown_id(self, table_store):
        assert table_store.get_index_by_id("missing") is None
        assert table_store.get_index_by_id(None) is None

    def test_duplicate_ids_resolve_to_first(self):
        """The first table with a duplicated ID wins."""
        store = TableStore.from_tables(
            [
                TranspositionTable(id="a"),
                TranspositionTable(id="dup"),
                TranspositionTable(id="dup"),
            ]
        )

        assert store.get_index_by_id("dup") == 1

    def test_lookups_on_empty_store(self):
        """An unloaded store answers 'not found' instead of raising."""
        store = TableStore(MagicMock())

        assert store.get_by_index(0) is None
        assert store.get_index_by_id("table_0") is None
        assert store.get_key_signature_display(0) == "?"


class TestKeySignatures:
    """Tests for key signature display."""

    def test_major_and_minor(self, table_store):
        assert table_store.get_key_signature_display(0) == "C"
        assert table_store.get_key_signature_display(0, "minor") == "Am"
        assert table_store.get_key_signature_display(2, "major") == "D"

    def test_missing_table(self, table_store):
        assert table_store.get_key_signature_display(40) == "?"

    def test_unknown_quality(self, table_store):
        assert table_store.get_key_signature_display(0, "lydian") == "?"

    def test_unpopulated_key_signature(self):
        """Key signature given only by ID has no display name."""
        store = TableStore.from_tables([TranspositionTable.from_dict({"_id": "t", "keySignature": "ks_1"})])

        assert store.get_key_signature_display(0) == "?"

    def test_key_signatures_listing(self, table_store):
        signatures = table_store.key_signatures()

        assert len(signatures) == 12
        assert signatures[9] == {"index": 9, "major": "A", "minor": "F#m", "table_id": "table_9"}
