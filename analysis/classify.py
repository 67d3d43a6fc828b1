"""
Line classifier for the engine's stderr diagnostics.

The parsers never scan raw text for substrings themselves. Each line is
first tagged with a LineKind, and the extractors then work only with the
lines of the kind they care about.
"""

import re
from enum import Enum

from analysis.constants import ANALYSIS_MARKERS, BRANCH_MARKER

_GRID_ROW_RE = re.compile(r"^\s*\d+(?:\s+\d+)*\s*$")


class LineKind(Enum):
    IGNORABLE = "ignorable"
    ANALYSIS_MARKER = "analysis_marker"
    BRANCH_LINE = "branch_line"
    GRID_ROW = "grid_row"


def classify_line(line: str) -> LineKind:
    """
    Tag one diagnostic line.

    Analysis markers win over branch markers, so a summary line that happens
    to contain "->" still opens the analysis section.

    Args:
        line: A single stderr line, with or without its trailing newline.

    Returns:
        The LineKind of the line.
    """
    if any(marker in line for marker in ANALYSIS_MARKERS):
        return LineKind.ANALYSIS_MARKER
    if BRANCH_MARKER in line:
        return LineKind.BRANCH_LINE
    if _GRID_ROW_RE.match(line):
        return LineKind.GRID_ROW
    return LineKind.IGNORABLE


def analysis_lines(text: str) -> list[str]:
    """
    Return the lines from the first analysis marker onward.

    When the log carries no marker at all, the whole log is in scope.
    """
    lines = text.split("\n")
    for index, line in enumerate(lines):
        if classify_line(line) is LineKind.ANALYSIS_MARKER:
            return lines[index:]
    return lines


def branch_lines(text: str) -> list[str]:
    """Return the in-scope lines that report a candidate branch."""
    return [
        line for line in analysis_lines(text)
        if classify_line(line) is LineKind.BRANCH_LINE
    ]
