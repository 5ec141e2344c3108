"""Data models for transposition tables and songs.

Provides dataclasses for the document-store entities consumed by the
transposition engine, with conversion to/from the store's JSON documents
(camelCase keys, ``_id`` identifiers) and explicit structural copies.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Optional

# Column names as stored in song chord references
REGULAR_COLUMNS = ("major", "naturalMinor", "harmonicMinor", "melodicMinor")
CHROMATIC_COLUMNS = ("one", "two", "three", "four")

CHORD_TYPE_REGULAR = "regular"
CHORD_TYPE_CHROMATIC = "chromatic"

# Fields copied by copy_sections(); bump the version when the set changes
COPY_FIELDS_VERSION = 1
SECTION_FIELDS = ("title", "direction")
LINE_FIELDS = ("chords", "text")


def _ref_id(value: Any) -> Optional[str]:
    """Get the id of a reference that may or may not be populated."""
    if isinstance(value, dict):
        return value.get("_id")
    return value


@dataclass(frozen=True)
class ChordVariant:
    """A single chord cell in a transposition table.

    Attributes:
        id: Chord document ID
        title: Display name (e.g., "F#m")
        type: Chord type title or ID
    """

    id: str
    title: str
    type: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ChordVariant":
        chord_type = data.get("type")
        if isinstance(chord_type, dict):
            chord_type = chord_type.get("title")
        return cls(id=data.get("_id", ""), title=data.get("title", ""), type=chord_type)


@dataclass(frozen=True)
class KeySignature:
    """Display names of a table's key in both qualities.

    Attributes:
        id: Key signature document ID
        major: Major key name (e.g., "C")
        minor: Relative minor key name (e.g., "Am")
        description: Optional description
    """

    id: str = ""
    major: str = ""
    minor: str = ""
    description: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Any) -> "KeySignature":
        # Unpopulated reference: only the ID is known
        if not isinstance(data, dict):
            return cls(id=data or "")
        return cls(
            id=data.get("_id", ""),
            major=data.get("major", ""),
            minor=data.get("minor", ""),
            description=data.get("description"),
        )


@dataclass(frozen=True)
class ChordRow:
    """One row of a transposition table, keyed by column name."""

    cells: dict[str, ChordVariant] = field(default_factory=dict)

    def get(self, column: Optional[str]) -> Optional[ChordVariant]:
        if column is None:
            return None
        return self.cells.get(column)

    @classmethod
    def from_dict(cls, data: dict[str, Any], columns: tuple[str, ...]) -> "ChordRow":
        cells = {}
        for column in columns:
            value = data.get(column)
            # Unpopulated references carry no title and cannot be displayed
            if isinstance(value, dict):
                cells[column] = ChordVariant.from_dict(value)
        return cls(cells=cells)


@dataclass(frozen=True)
class TranspositionTable:
    """Pre-authored chord table for one chromatic key.

    All tables share the same row/column layout, so a chord reference
    (row, column) is valid against every table.

    Attributes:
        id: Table document ID
        key_signature: Key names shown for this table
        type: Table type title or ID
        rows: Regular rows (major and minor variants)
        chromatic_rows: Chromatic rows (up to four slots each)
        vocal_rows: Vocal reference note names
    """

    id: str
    key_signature: KeySignature = field(default_factory=KeySignature)
    type: Optional[str] = None
    rows: tuple[ChordRow, ...] = ()
    chromatic_rows: tuple[ChordRow, ...] = ()
    vocal_rows: tuple[str, ...] = ()

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TranspositionTable":
        """Create a TranspositionTable from a store document.

        Args:
            data: Table document with populated chord references

        Returns:
            TranspositionTable instance
        """
        table_type = data.get("type")
        if isinstance(table_type, dict):
            table_type = table_type.get("title")

        return cls(
            id=data.get("_id", ""),
            key_signature=KeySignature.from_dict(data.get("keySignature")),
            type=table_type,
            rows=tuple(ChordRow.from_dict(r, REGULAR_COLUMNS) for r in data.get("rows") or []),
            chromatic_rows=tuple(
                ChordRow.from_dict(r, CHROMATIC_COLUMNS) for r in data.get("chromaticRows") or []
            ),
            vocal_rows=tuple(data.get("vocalRows") or []),
        )


@dataclass
class SongChord:
    """A chord used by a song, addressed by table/row/column.

    Attributes:
        row_index: Row in the table's regular or chromatic rows
        column: Column name within the row
        table: ID of the table the chord was authored against
        type: "regular" or "chromatic"
        title: Cached display title
        chord: Cached chord document ID
        key_signature: Cached key signature ID of the table
    """

    row_index: Optional[int] = None
    column: Optional[str] = None
    table: Optional[str] = None
    type: str = CHORD_TYPE_REGULAR
    title: Optional[str] = None
    chord: Optional[str] = None
    key_signature: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SongChord":
        return cls(
            row_index=data.get("rowIndex"),
            column=data.get("column"),
            table=_ref_id(data.get("table")),
            type=data.get("type") or CHORD_TYPE_REGULAR,
            title=data.get("title"),
            chord=_ref_id(data.get("chord")),
            key_signature=_ref_id(data.get("keySignature")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "rowIndex": self.row_index,
            "column": self.column,
            "table": self.table,
            "type": self.type,
            "title": self.title,
            "chord": self.chord,
            "keySignature": self.key_signature,
        }

    def copy(self) -> "SongChord":
        return replace(self)


@dataclass
class VocalNote:
    """Vocal reference note, addressed by table and vocal row index."""

    note: Optional[str] = None
    index: Optional[int] = None
    table: Optional[str] = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VocalNote":
        return cls(
            note=data.get("note"),
            index=data.get("index"),
            table=_ref_id(data.get("table")),
        )

    def to_dict(self) -> dict[str, Any]:
        return {"note": self.note, "index": self.index, "table": self.table}

    def copy(self) -> "VocalNote":
        return replace(self)


@dataclass
class SongSectionLine:
    """A chords line and the lyric line it sits above."""

    chords: str = ""
    text: str = ""

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SongSectionLine":
        return cls(chords=data.get("chords") or "", text=data.get("text") or "")

    def to_dict(self) -> dict[str, Any]:
        return {"chords": self.chords, "text": self.text}


@dataclass
class SongSection:
    """A titled block of lines (verse, chorus, ...).

    Attributes:
        title: Section title
        direction: Text direction hint passed through for display
        lines: Chord/lyric line pairs
    """

    title: Optional[str] = None
    direction: Optional[str] = None
    lines: list[SongSectionLine] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SongSection":
        return cls(
            title=data.get("title"),
            direction=data.get("direction"),
            lines=[SongSectionLine.from_dict(line) for line in data.get("lines") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "title": self.title,
            "direction": self.direction,
            "lines": [line.to_dict() for line in self.lines],
        }


@dataclass
class SongChords:
    """Chord metadata of a song.

    Attributes:
        key_signature: Key quality the song is written in ("major" or "minor")
        vocal_note: Vocal reference note
        chord_list: Chords used by the song; the first one defines the current key
    """

    key_signature: Optional[str] = None
    vocal_note: Optional[VocalNote] = None
    chord_list: list[SongChord] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Optional[dict[str, Any]]) -> "SongChords":
        if not data:
            return cls()
        vocal_note = data.get("vocalNote")
        return cls(
            key_signature=data.get("keySignature"),
            vocal_note=VocalNote.from_dict(vocal_note) if vocal_note else None,
            chord_list=[SongChord.from_dict(c) for c in data.get("list") or []],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "keySignature": self.key_signature,
            "vocalNote": self.vocal_note.to_dict() if self.vocal_note else None,
            "list": [chord.to_dict() for chord in self.chord_list],
        }


@dataclass
class Song:
    """A song with its chord metadata and tab sections.

    Attributes:
        id: Song document ID
        title: Song title
        rhythm: Rhythm name
        chords: Chord metadata
        sections: Tab sections
    """

    id: str
    title: str = ""
    rhythm: Optional[str] = None
    chords: SongChords = field(default_factory=SongChords)
    sections: list[SongSection] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict[str, Any], lang: Optional[str] = None) -> "Song":
        """Create a Song from a store document.

        Documents with per-language ``content`` use the requested language,
        falling back to the document's ``defaultLang``.

        Args:
            data: Song document
            lang: Content language code

        Returns:
            Song instance
        """
        title = data.get("title", "")
        sections = data.get("sections") or []

        content = data.get("content")
        if isinstance(content, dict) and content:
            candidates = [content.get(lang), content.get(data.get("defaultLang")), *content.values()]
            localized = next((c for c in candidates if isinstance(c, dict)), None)
            if localized is not None:
                title = localized.get("title", title)
                sections = localized.get("sections") or []

        return cls(
            id=data.get("_id", ""),
            title=title,
            rhythm=data.get("rhythm"),
            chords=SongChords.from_dict(data.get("chords")),
            sections=[SongSection.from_dict(s) for s in sections],
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "_id": self.id,
            "title": self.title,
            "rhythm": self.rhythm,
            "chords": self.chords.to_dict(),
            "sections": [section.to_dict() for section in self.sections],
        }


def copy_line(line: SongSectionLine) -> SongSectionLine:
    return SongSectionLine(**{name: getattr(line, name) for name in LINE_FIELDS})


def copy_section(section: SongSection) -> SongSection:
    values = {name: getattr(section, name) for name in SECTION_FIELDS}
    return SongSection(lines=[copy_line(line) for line in section.lines], **values)


def copy_sections(sections: list[SongSection]) -> list[SongSection]:
    """Copy sections field by field.

    Only the fields named in SECTION_FIELDS and LINE_FIELDS are carried over.

    Args:
        sections: Sections to copy

    Returns:
        New list of new section and line objects
    """
    return [copy_section(section) for section in sections]
