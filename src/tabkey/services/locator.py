"""Whole-word chord token search in chord lines."""

from dataclasses import dataclass
from typing import Optional


@dataclass
class ChordPosition:
    """Location of a chord token in a chord line.

    Attributes:
        start: Offset of the first character
        end: Offset of the last character (inclusive)
        word: Token text at that location
        new_word: Replacement text, if the token is being rewritten
    """

    start: int
    end: int
    word: str
    new_word: Optional[str] = None

    @property
    def length(self) -> int:
        return self.end - self.start + 1

    @property
    def delta(self) -> int:
        """Signed length change caused by the replacement."""
        if self.new_word is None:
            return 0
        return len(self.new_word) - len(self.word)


def _is_boundary(line: str, index: int) -> bool:
    return index < 0 or index >= len(line) or line[index] == " "


def find_word_positions(line: str, token: str, offset: int = 0) -> list[ChordPosition]:
    """Find every whole-word occurrence of a token in a chord line.

    A match counts only when flanked by spaces or line edges, so "C" is not
    found inside "Cm". A rejected match does not stop the search: scanning
    resumes one character past it.

    Args:
        line: Full chord line
        token: Chord token to look for
        offset: Position to search from

    Returns:
        Positions with offsets absolute to the full line, in line order
    """
    if not token:
        return []

    positions = []
    start = line.find(token, offset)
    while start != -1:
        end = start + len(token) - 1
        if _is_boundary(line, start - 1) and _is_boundary(line, end + 1):
            positions.append(ChordPosition(start=start, end=end, word=token))
            start = line.find(token, end + 1)
        else:
            start = line.find(token, start + 1)

    return positions


def separate_chords(line: str) -> list[ChordPosition]:
    """Locate every chord token of a chord line.

    Args:
        line: Chord line (tokens separated by spaces)

    Returns:
        Positions of all tokens, sorted by start offset
    """
    # dict.fromkeys keeps first-seen order while dropping duplicates
    tokens = dict.fromkeys(t for t in line.split(" ") if t)

    positions = []
    for token in tokens:
        positions.extend(find_word_positions(line, token))

    positions.sort(key=lambda p: p.start)
    return positions
