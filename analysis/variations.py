"""
Variation parser: turns engine branch lines into structured records.

After a search, the engine prints one line per candidate move:

    D4 ->     400 (V: 54.32%) (LCB: 51.10%) (N: 12.3%) PV: D4 Q16 C3 D5 E6

From that line we extract the visit count (400), the parenthesized
statistics in order of appearance, and the principal variation. The parser
is lenient: anything that does not have the expected shape is skipped or
carried as a sentinel, never raised.
"""

import re
from dataclasses import dataclass, field

from analysis.classify import branch_lines
from analysis.constants import (
    BRANCH_MARKER,
    FULL_DEPTH_LIMIT,
    MIN_VARIATION_LENGTH,
    PV_MARKER,
)

_STAT_GROUP_RE = re.compile(r"\(([^()]*)\)")


@dataclass
class Variation:
    """
    One candidate line reported by the engine.

    Attributes:
        visits: Playouts spent on this branch, or None when the count could
                not be read as an integer.
        stats:  Statistic name -> raw value string, in order of appearance.
        moves:  Principal variation as GTP vertices, starting with the
                candidate move itself.
    """

    visits: int | None
    stats: dict[str, str] = field(default_factory=dict)
    moves: list[str] = field(default_factory=list)


def _parse_visits(text: str) -> int | None:
    try:
        return int(text.strip())
    except ValueError:
        return None


def _parse_stats(text: str) -> dict[str, str]:
    """
    Parse "(V: 54.32%) (N: 12.3%)" into {"V": "54.32%", "N": "12.3%"}.

    The key is the first token in front of the colon. Groups without a colon
    are ignored, and a repeated key keeps its first position.
    """
    stats: dict[str, str] = {}
    for group in _STAT_GROUP_RE.findall(text):
        name, sep, value = group.partition(":")
        tokens = name.split()
        if not sep or not tokens:
            continue
        key = tokens[0]
        if key not in stats:
            stats[key] = " ".join(value.split())
    return stats


def pv_moves(line: str) -> list[str]:
    """Return every token after the PV marker, or [] when it is missing."""
    pv_index = line.find(PV_MARKER)
    if pv_index < 0:
        return []
    return line[pv_index + len(PV_MARKER):].split()


def parse_branch_line(line: str, depth_limit: int = FULL_DEPTH_LIMIT) -> Variation:
    """
    Parse a single branch line without applying the minimum-length filter.

    Args:
        line:        A line classified as a branch line.
        depth_limit: Maximum number of PV moves to keep.

    Returns:
        The Variation for this line. Moves may be shorter than the minimum.
    """
    marker_index = line.index(BRANCH_MARKER) + len(BRANCH_MARKER)
    pv_index = line.find(PV_MARKER)
    if pv_index < 0:
        pv_index = len(line)

    paren_index = line.find("(", marker_index)
    if paren_index < 0 or paren_index > pv_index:
        visits = _parse_visits(line[marker_index:pv_index])
        stats: dict[str, str] = {}
    else:
        visits = _parse_visits(line[marker_index:paren_index])
        stats = _parse_stats(line[paren_index:pv_index])

    return Variation(
        visits=visits,
        stats=stats,
        moves=pv_moves(line)[:depth_limit],
    )


def parse_variations(text: str, depth_limit: int = FULL_DEPTH_LIMIT) -> list[Variation]:
    """
    Extract every meaningful variation from a captured diagnostic log.

    Only branch lines after the first analysis marker are considered (the
    whole log when there is no marker). Variations whose principal
    variation has fewer than MIN_VARIATION_LENGTH moves are dropped.

    Args:
        text:        Captured stderr text.
        depth_limit: Maximum number of moves kept per variation.

    Returns:
        Variations in the order the engine printed them. Empty when the log
        has no qualifying lines.
    """
    variations = []
    for line in branch_lines(text):
        variation = parse_branch_line(line, depth_limit)
        if len(variation.moves) >= MIN_VARIATION_LENGTH:
            variations.append(variation)
    return variations
