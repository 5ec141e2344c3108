"""tabkey - Chord sheet transposition for tab sheets.

This package provides tools for:
- Loading the pre-authored transposition tables (one per chromatic key)
- Re-mapping a song's chords and vocal note into a different key
- Rewriting chord lines while keeping chords aligned above their lyrics
"""

__version__ = "0.1.0"
