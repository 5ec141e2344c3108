"""Chord line rebuilding with alignment-preserving spacing.

When a chord is replaced by a name of a different length, the spaces around
it are adjusted so the following chords stay over the syllables they belong
to. The line is modeled as gaps and tokens::

    gap[0] token[0] gap[1] token[1] ... token[n-1] gap[n]

Each token's length change is absorbed by the gap after it. When that gap
would fall below its floor (1 space between tokens, 0 at the edges), the
rest is taken from the gap before the token, and anything left after that
lengthens the line.
"""

from tabkey.logging_config import get_logger
from tabkey.services.locator import ChordPosition

logger = get_logger(__name__)


class MalformedPositionError(ValueError):
    """Token positions don't describe the line they were computed for."""


def _validate(line: str, positions: list[ChordPosition]) -> None:
    """Check positions are ordered, disjoint and match the line.

    Raises:
        MalformedPositionError: On the first inconsistency found
    """
    previous_end = -1
    for position in positions:
        if position.start < 0 or position.length < 1 or position.end >= len(line):
            raise MalformedPositionError(f"Position out of range: {position}")
        if previous_end >= 0 and position.start <= previous_end + 1:
            raise MalformedPositionError(f"Position overlaps or touches previous token: {position}")
        if line[position.start:position.start + position.length] != position.word:
            raise MalformedPositionError(f"Word {position.word!r} not found at {position.start}")
        if line[previous_end + 1:position.start].strip(" "):
            raise MalformedPositionError(f"Untracked text before {position.word!r}")
        previous_end = position.end

    if line[previous_end + 1:].strip(" "):
        raise MalformedPositionError("Untracked text after last token")


def _compute_gaps(line_length: int, positions: list[ChordPosition]) -> list[int]:
    """Compute the space counts around each token after replacement."""
    gaps = [positions[0].start]
    for previous, current in zip(positions, positions[1:]):
        gaps.append(current.start - previous.end - 1)
    gaps.append(line_length - positions[-1].end - 1)

    floors = [0] + [1] * (len(positions) - 1) + [0]

    for i, position in enumerate(positions):
        after, before = i + 1, i
        gaps[after] -= position.delta
        if gaps[after] >= floors[after]:
            continue

        excess = floors[after] - gaps[after]
        gaps[after] = floors[after]
        gaps[before] -= min(excess, gaps[before] - floors[before])

    if any(gap < floor for gap, floor in zip(gaps, floors)):
        raise MalformedPositionError(f"Computed gaps below floor: {gaps}")

    return gaps


def render_line(line: str, positions: list[ChordPosition]) -> str:
    """Rebuild a chord line with replacement chord names.

    Args:
        line: Original chord line
        positions: All tokens of the line in order; tokens with new_word set
            are replaced

    Returns:
        Rebuilt line, or the original line when positions are inconsistent
    """
    if not positions:
        return line

    try:
        _validate(line, positions)
        gaps = _compute_gaps(len(line), positions)
    except MalformedPositionError as e:
        logger.warning(f"Keeping chord line unchanged: {e}")
        return line

    parts = [" " * gaps[0]]
    for position, gap in zip(positions, gaps[1:]):
        parts.append(position.new_word if position.new_word is not None else position.word)
        parts.append(" " * gap)

    return "".join(parts)
