"""Transposition of a song's chords, chord lines and vocal note.

Every call is a pure function of its inputs and the loaded tables: nothing
about the currently shown key is remembered, and inputs are never mutated.
Callers keep the original song data and transpose from it each time, so
repeated transpositions never compound.
"""

from dataclasses import dataclass, field, replace
from typing import Optional

from tabkey.logging_config import get_logger
from tabkey.models import Song, SongChord, SongChords, SongSection, VocalNote, copy_sections
from tabkey.services.locator import separate_chords
from tabkey.services.mapper import ChordMapper
from tabkey.services.renderer import render_line
from tabkey.services.tables import TableStore

logger = get_logger(__name__)


def _copy_note(vocal_note: Optional[VocalNote]) -> Optional[VocalNote]:
    return vocal_note.copy() if vocal_note else None


@dataclass
class TransposeResult:
    """New values produced by one transposition.

    Attributes:
        sections: Sections with rewritten chord lines
        vocal_note: Transposed vocal note
        chord_list: Transposed chords, index-aligned with the originals
    """

    sections: list[SongSection] = field(default_factory=list)
    vocal_note: Optional[VocalNote] = None
    chord_list: list[SongChord] = field(default_factory=list)


class TransposeEngine:
    """Transposes songs using a table store.

    Attributes:
        store: Loaded table store
        mapper: Chord mapper over the same store
    """

    def __init__(self, store: TableStore, mapper: Optional[ChordMapper] = None):
        self.store = store
        self.mapper = mapper or ChordMapper(store)

    def get_original_table_index(self, chords: SongChords) -> int:
        """Get the index of the table the song's first chord refers to.

        Args:
            chords: Song chord metadata

        Returns:
            Table index, 0 when there are no chords or the table is unknown
        """
        if not chords.chord_list:
            return 0

        table_id = chords.chord_list[0].table
        index = self.store.get_index_by_id(table_id)
        if index is None:
            logger.warning(f"Unknown table {table_id!r} on first chord, using table 0")
            return 0
        return index

    def transpose_chord_list(self, chords: list[SongChord], table_index: int) -> list[SongChord]:
        return self.mapper.map_all(chords, table_index)

    def map_vocal_note(self, vocal_note: Optional[VocalNote], table_index: int) -> Optional[VocalNote]:
        return self.mapper.map_vocal_note(table_index, vocal_note)

    def get_key_signature_display(self, table_index: int, quality: str = "major") -> str:
        return self.store.get_key_signature_display(table_index, quality)

    def transpose_section_lines(
        self,
        sections: list[SongSection],
        original_chords: list[SongChord],
        transposed_chords: list[SongChord],
    ) -> list[SongSection]:
        """Rewrite every chord line with transposed chord names.

        Tokens are located by the original chord titles and replaced by the
        transposed title at the same list index.

        Args:
            sections: Original sections
            original_chords: Chords the lines were written with
            transposed_chords: Result of transpose_chord_list() on original_chords

        Returns:
            New sections; lines whose rebuild is empty keep their original text
        """
        replacements: dict[str, str] = {}
        for original, transposed in zip(original_chords, transposed_chords):
            if original.title and transposed.title:
                replacements.setdefault(original.title, transposed.title)

        result = copy_sections(sections)
        for section in result:
            for line in section.lines:
                if not line.chords:
                    continue

                positions = separate_chords(line.chords)
                for position in positions:
                    position.new_word = replacements.get(position.word)

                rebuilt = render_line(line.chords, positions)
                if rebuilt:
                    line.chords = rebuilt

        return result

    def transpose_all(
        self,
        sections: list[SongSection],
        chords: SongChords,
        table_index: int,
    ) -> TransposeResult:
        """Transpose chords, chord lines and vocal note to a table.

        Args:
            sections: Original sections
            chords: Original chord metadata (list and vocal note)
            table_index: Target table index

        Returns:
            TransposeResult with new values
        """
        if not self.store.is_loaded:
            logger.warning("Transposition tables not loaded, returning song unchanged")
            return TransposeResult(
                sections=copy_sections(sections),
                vocal_note=_copy_note(chords.vocal_note),
                chord_list=[chord.copy() for chord in chords.chord_list],
            )

        if not chords.chord_list:
            return TransposeResult(
                sections=copy_sections(sections),
                vocal_note=_copy_note(chords.vocal_note),
                chord_list=[],
            )

        # Lines are rewritten by list index, so all chords are mapped first
        transposed = self.transpose_chord_list(chords.chord_list, table_index)
        new_sections = self.transpose_section_lines(sections, chords.chord_list, transposed)
        vocal_note = self.map_vocal_note(chords.vocal_note, table_index)

        logger.debug(
            f"Transposed {len(transposed)} chords to table {table_index} "
            f"({self.get_key_signature_display(table_index)})"
        )
        return TransposeResult(sections=new_sections, vocal_note=vocal_note, chord_list=transposed)

    def transpose_song(self, song: Song, table_index: int) -> Song:
        """Transpose a whole song into a new Song.

        Args:
            song: Original song
            table_index: Target table index

        Returns:
            New Song in the target key
        """
        result = self.transpose_all(song.sections, song.chords, table_index)
        chords = replace(song.chords, vocal_note=result.vocal_note, chord_list=result.chord_list)
        return replace(song, chords=chords, sections=result.sections)
