"""Shared fixtures for tabkey tests."""

import pytest

from tabkey.models import Song
from tabkey.services.tables import TableStore

NOTES = ["C", "C#", "D", "D#", "E", "F", "F#", "G", "G#", "A", "A#", "B"]

# Scale degrees (semitones above the key) of the regular rows
ROW_INTERVALS = [0, 2, 4, 5, 7, 9, 11]


def _variant(title: str) -> dict:
    return {"_id": f"chord_{title}", "title": title, "type": {"_id": "type_1", "title": "triad"}}


def make_table_document(key_index: int) -> dict:
    """Build a table document for the key NOTES[key_index]."""

    def note(offset: int) -> str:
        return NOTES[(key_index + offset) % 12]

    rows = [
        {
            "major": _variant(note(interval)),
            "naturalMinor": _variant(f"{note(interval)}m"),
            "harmonicMinor": _variant(f"{note(interval)}7"),
            "melodicMinor": _variant(f"{note(interval)}m7"),
        }
        for interval in ROW_INTERVALS
    ]
    chromatic_rows = [
        {"one": _variant(note(1)), "two": _variant(f"{note(1)}m")},
        {"one": _variant(f"{note(6)}dim")},
    ]

    return {
        "_id": f"table_{key_index}",
        "keySignature": {
            "_id": f"ks_{key_index}",
            "major": note(0),
            "minor": f"{note(9)}m",
        },
        "type": {"_id": "type_table", "title": "standard"},
        "rows": rows,
        "chromaticRows": chromatic_rows,
        "vocalRows": [f"{note(i)}4" for i in range(3)],
    }


@pytest.fixture
def table_documents():
    """Twelve table documents, C through B."""
    return [make_table_document(i) for i in range(12)]


@pytest.fixture
def table_source(table_documents):
    """Table source returning the twelve table documents."""

    class _Source:
        calls = 0

        def fetch_tables(self):
            _Source.calls += 1
            return table_documents

    return _Source()


@pytest.fixture
def table_store(table_source):
    """Loaded TableStore with twelve tables."""
    store = TableStore(table_source)
    store.load()
    return store


@pytest.fixture
def song_document():
    """Song document in C with two sections."""
    return {
        "_id": "song_0001",
        "title": "Morning Song",
        "rhythm": "4/4 Pop",
        "chords": {
            "keySignature": "major",
            "vocalNote": {"note": "C#4", "index": 1, "table": "table_0"},
            "list": [
                {"rowIndex": 0, "column": "major", "table": "table_0", "type": "regular", "title": "C"},
                {"rowIndex": 5, "column": "naturalMinor", "table": "table_0", "type": "regular", "title": "Am"},
                {"rowIndex": 3, "column": "major", "table": "table_0", "type": "regular", "title": "F"},
                {"rowIndex": 4, "column": "major", "table": "table_0", "type": "regular", "title": "G"},
            ],
        },
        "sections": [
            {
                "title": "Verse",
                "direction": "ltr",
                "lines": [
                    {"chords": "C       Am      F   G", "text": "Morning has broken like the first"},
                    {"chords": "", "text": "no chords on this line"},
                ],
            },
            {
                "title": "Chorus",
                "lines": [
                    {"chords": "   F         C", "text": "Praise for the singing"},
                ],
            },
        ],
    }


@pytest.fixture
def song(song_document):
    """Song parsed from song_document."""
    return Song.from_dict(song_document)
