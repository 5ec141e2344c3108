"""Chord re-mapping against a different transposition table.

Because all tables share one layout, transposing a chord is a lookup of the
same (row, column) cell in the target table. A missing cell is not an
error: the original chord or note is kept.
"""

from dataclasses import dataclass
from typing import Optional

from tabkey.logging_config import get_logger
from tabkey.models import CHORD_TYPE_CHROMATIC, SongChord, VocalNote
from tabkey.services.tables import TableStore

logger = get_logger(__name__)


@dataclass(frozen=True)
class ChordMapping:
    """Transposed chord found in a target table."""

    title: str
    id: str


class ChordMapper:
    """Resolves song chord references against a target table.

    Attributes:
        store: Table store to read from
    """

    def __init__(self, store: TableStore):
        self.store = store

    def resolve(self, table_index: int, chord: SongChord) -> Optional[ChordMapping]:
        """Look up a chord's cell in the table at table_index.

        Args:
            table_index: Target table index
            chord: Chord reference (row, column, type)

        Returns:
            ChordMapping, or None when the cell doesn't exist
        """
        table = self.store.get_by_index(table_index)
        if table is None or not isinstance(chord.row_index, int):
            return None

        rows = table.chromatic_rows if chord.type == CHORD_TYPE_CHROMATIC else table.rows
        if chord.row_index < 0 or chord.row_index >= len(rows):
            return None

        variant = rows[chord.row_index].get(chord.column)
        if variant is None or not variant.title:
            return None

        return ChordMapping(title=variant.title, id=variant.id)

    def map_vocal_note(self, table_index: int, vocal_note: Optional[VocalNote]) -> Optional[VocalNote]:
        """Transpose the vocal reference note.

        Args:
            table_index: Target table index
            vocal_note: Original vocal note (may be None)

        Returns:
            New VocalNote; a copy of the original when no note is found
        """
        if vocal_note is None:
            return None

        table = self.store.get_by_index(table_index)
        index = vocal_note.index
        if table is None or index is None or index < 0 or index >= len(table.vocal_rows):
            logger.debug(f"No vocal note at index {index} in table {table_index}")
            return vocal_note.copy()

        return VocalNote(note=table.vocal_rows[index], index=index, table=table.id)

    def map_all(self, chords: list[SongChord], table_index: int) -> list[SongChord]:
        """Transpose every chord, keeping list positions aligned.

        Args:
            chords: Original chords
            table_index: Target table index

        Returns:
            New list of the same length; chords without a mapping are copies
            of the originals
        """
        table = self.store.get_by_index(table_index)
        result = []

        for chord in chords:
            mapping = self.resolve(table_index, chord)
            if mapping is None:
                logger.debug(f"No mapping for chord {chord.title!r} in table {table_index}")
                result.append(chord.copy())
                continue

            transposed = chord.copy()
            transposed.title = mapping.title
            transposed.chord = mapping.id
            transposed.table = table.id
            transposed.key_signature = table.key_signature.id or chord.key_signature
            result.append(transposed)

        return result
