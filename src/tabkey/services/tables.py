"""Transposition table store.

Holds the 12 pre-authored transposition tables (one per chromatic key),
loaded once from a table source and read-only afterwards.
"""

import asyncio
from typing import Any, Optional

from tabkey.logging_config import get_logger
from tabkey.models import TranspositionTable
from tabkey.sources import TableSource

logger = get_logger(__name__)

# One table per chromatic key: C, C#, D, D#, E, F, F#, G, G#, A, A#, B
EXPECTED_TABLE_COUNT = 12

MISSING_DISPLAY = "?"


class LoadError(Exception):
    """Transposition tables could not be loaded."""


class TableStore:
    """Read-only store of transposition tables.

    Tables are swapped in as a whole once fetched and parsed, so the store
    is never observed half-loaded. Lookups never raise.

    Attributes:
        source: Where tables are fetched from
        error: Message of the last failed load, if any
    """

    def __init__(self, source: TableSource):
        """Initialize an empty store.

        Args:
            source: Table source used by load()
        """
        self.source = source
        self.error: Optional[str] = None
        self.is_loading = False
        self._tables: tuple[TranspositionTable, ...] = ()
        self._loaded = False

    @classmethod
    def from_tables(cls, tables: list[TranspositionTable]) -> "TableStore":
        """Create an already loaded store from parsed tables."""
        store = cls(source=None)
        store._tables = tuple(tables)
        store._loaded = bool(tables)
        return store

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def table_count(self) -> int:
        return len(self._tables)

    @property
    def tables(self) -> tuple[TranspositionTable, ...]:
        return self._tables

    def _parse(self, documents: Any) -> tuple[TranspositionTable, ...]:
        if not documents:
            raise LoadError("No transposition tables found")

        try:
            tables = tuple(TranspositionTable.from_dict(doc) for doc in documents)
        except (AttributeError, TypeError) as e:
            raise LoadError(f"Malformed transposition table: {e}") from e

        if len(tables) < EXPECTED_TABLE_COUNT:
            logger.warning(
                f"Loaded {len(tables)} of {EXPECTED_TABLE_COUNT} transposition tables; "
                "transposing to missing keys will leave chords unchanged"
            )
        return tables

    def _commit(self, tables: tuple[TranspositionTable, ...]) -> None:
        self._tables = tables
        self._loaded = True
        self.error = None
        logger.info(f"Loaded {len(tables)} transposition tables")

    def load(self, force_reload: bool = False) -> None:
        """Fetch and parse all tables from the source.

        Args:
            force_reload: Reload even if tables are already loaded

        Raises:
            LoadError: If the source fails or returns no tables
        """
        if self._loaded and not force_reload:
            return

        self.is_loading = True
        try:
            try:
                documents = self.source.fetch_tables()
            except Exception as e:
                raise LoadError(f"Failed to fetch transposition tables: {e}") from e
            self._commit(self._parse(documents))
        except LoadError as e:
            self.error = str(e)
            logger.error(self.error)
            raise
        finally:
            self.is_loading = False

    async def aload(self, force_reload: bool = False) -> None:
        """Async variant of load().

        The fetch runs in a worker thread. Tables are committed only after the
        await returns, so cancelling leaves the store as it was before.

        Args:
            force_reload: Reload even if tables are already loaded

        Raises:
            LoadError: If the source fails or returns no tables
        """
        if self._loaded and not force_reload:
            return

        self.is_loading = True
        try:
            try:
                documents = await asyncio.to_thread(self.source.fetch_tables)
            except asyncio.CancelledError:
                logger.info("Table load cancelled")
                raise
            except Exception as e:
                raise LoadError(f"Failed to fetch transposition tables: {e}") from e
            self._commit(self._parse(documents))
        except LoadError as e:
            self.error = str(e)
            logger.error(self.error)
            raise
        finally:
            self.is_loading = False

    def get_by_index(self, index: int) -> Optional[TranspositionTable]:
        """Get a table by index (0-11 for C through B).

        Returns:
            Table or None if the index is out of range
        """
        if index < 0 or index >= len(self._tables):
            return None
        return self._tables[index]

    def get_index_by_id(self, table_id: Optional[str]) -> Optional[int]:
        """Get the index of the first table with the given ID.

        Returns:
            Table index or None if not found
        """
        for index, table in enumerate(self._tables):
            if table.id == table_id:
                return index
        return None

    def get_key_signature_display(self, index: int, quality: str = "major") -> str:
        """Get the key name of a table for display.

        Args:
            index: Table index
            quality: "major" or "minor"

        Returns:
            Key name, or "?" when the table or name is missing
        """
        table = self.get_by_index(index)
        if table is None or quality not in ("major", "minor"):
            return MISSING_DISPLAY
        return getattr(table.key_signature, quality) or MISSING_DISPLAY

    def key_signatures(self) -> list[dict[str, Any]]:
        """List key signature names of all tables.

        Returns:
            List of dicts with index, major, minor and table_id
        """
        return [
            {
                "index": index,
                "major": table.key_signature.major,
                "minor": table.key_signature.minor,
                "table_id": table.id,
            }
            for index, table in enumerate(self._tables)
        ]
