"""
Label assigner: letters A, B, C, ... for the candidate moves.

Sabaki draws these letters on the board so that each candidate can be
matched to its variation. Only the first move of every variation matters.
"""

from analysis.classify import branch_lines
from analysis.constants import LABEL_LETTERS, MIN_VARIATION_LENGTH
from analysis.sgf import coord2point
from analysis.variations import pv_moves


def assign_labels(text: str, size: int) -> list[tuple[str, str]]:
    """
    Pair the first move of every variation with a letter.

    Letters run A..Z; every variation past the 26th is labelled Z as well.
    The same minimum-length filter as the variation parser applies, so the
    letters line up with the rendered variations.

    Args:
        text: Captured stderr text.
        size: Board size used for the vertex conversion.

    Returns:
        (point, letter) pairs in variation order.
    """
    first_moves = [
        moves[0] for moves in map(pv_moves, branch_lines(text))
        if len(moves) >= MIN_VARIATION_LENGTH
    ]
    last = len(LABEL_LETTERS) - 1
    return [
        (coord2point(move, size), LABEL_LETTERS[min(i, last)])
        for i, move in enumerate(first_moves)
    ]


def format_labels(labels: list[tuple[str, str]]) -> str:
    """Render labels the way Sabaki reads them: "dp:A;pp:B"."""
    return ";".join(f"{point}:{letter}" for point, letter in labels)
