"""Transposition services for tabkey."""

from tabkey.services.locator import find_word_positions, separate_chords
from tabkey.services.mapper import ChordMapper, ChordMapping
from tabkey.services.renderer import render_line
from tabkey.services.tables import LoadError, TableStore
from tabkey.services.transpose import TransposeEngine, TransposeResult

__all__ = [
    "ChordMapper",
    "ChordMapping",
    "LoadError",
    "TableStore",
    "TransposeEngine",
    "TransposeResult",
    "find_word_positions",
    "render_line",
    "separate_chords",
]
