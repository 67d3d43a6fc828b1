"""
SGF helpers: GTP vertex conversion and move-tree rendering.

Sabaki receives the engine's variations as SGF text and merges them into
the game tree. Two layouts are supported:

- Nested: one node per move, "(;C[...]B[dp];W[pp];B[cq])", which Sabaki
  shows as a playable variation.
- Flat: one node per variation that sets up the final arrangement with
  AB/AW and numbers the stones with LB, "(;C[...]AB[dp][cq]AW[pp]LB[dp:1]...)".

Each variation node carries a Markdown comment listing the visit count and
the engine statistics.
"""

from enum import Enum

from analysis.constants import MAX_BOARD_SIZE, MIN_BOARD_SIZE
from analysis.variations import Variation

# GTP skips "I" to avoid confusion with "J"; SGF uses plain a-z.
_GTP_COLUMNS = "ABCDEFGHJKLMNOPQRSTUVWXYZ"
_SGF_ALPHABET = "abcdefghijklmnopqrstuvwxyz"


class Color(str, Enum):
    BLACK = "B"
    WHITE = "W"

    @property
    def opponent(self) -> "Color":
        return Color.WHITE if self is Color.BLACK else Color.BLACK

    @classmethod
    def from_gtp(cls, token: str) -> "Color | None":
        """Read a GTP color argument ("b", "black", "W", ...) by its first letter."""
        if not token:
            return None
        try:
            return cls(token[0].upper())
        except ValueError:
            return None


def coord2point(vertex: str, size: int) -> str:
    """
    Convert a GTP vertex to an SGF point.

    "D4" on a 19x19 board is column d, row 19 - 4 = 15 (p), so "dp". Passes,
    resignations and anything off the board convert to the empty string.

    Args:
        vertex: GTP vertex such as "D4" or "pass".
        size:   Board size in [MIN_BOARD_SIZE, MAX_BOARD_SIZE].

    Returns:
        The two-letter SGF point, or "" when the vertex is not on the board.
    """
    if not MIN_BOARD_SIZE <= size <= MAX_BOARD_SIZE or len(vertex) < 2:
        return ""

    x = _GTP_COLUMNS.find(vertex[0].upper())
    try:
        y = size - int(vertex[1:])
    except ValueError:
        return ""

    if not (0 <= x < size and 0 <= y < size):
        return ""
    return _SGF_ALPHABET[x] + _SGF_ALPHABET[y]


def escape_text(text: str) -> str:
    """Escape a property value so that it cannot close the SGF bracket."""
    return text.replace("\\", "\\\\").replace("]", "\\]")


def annotation(variation: Variation) -> str:
    """Render the Markdown comment shown on every variation node."""
    visits = "?" if variation.visits is None else str(variation.visits)
    lines = [f"- `{visits}` visits"]
    lines.extend(f"  - **{key}** `{value}`" for key, value in variation.stats.items())
    return "\n".join(lines)


def _nested_body(variation: Variation, colors: tuple[Color, Color], size: int) -> str:
    return ";".join(
        f"{colors[i % 2].value}[{coord2point(move, size)}]"
        for i, move in enumerate(variation.moves)
    )


def _flat_body(variation: Variation, colors: tuple[Color, Color], size: int) -> str:
    black: list[str] = []
    white: list[str] = []
    order: list[str] = []

    for i, move in enumerate(variation.moves):
        point = coord2point(move, size)
        if point == "":
            continue
        (black if colors[i % 2] is Color.BLACK else white).append(point)
        order.append(f"{point}:{i + 1}")

    return "".join(
        f"{prop}[{']['.join(points)}]"
        for prop, points in (("AB", black), ("AW", white), ("LB", order))
    )


def variations_to_sgf(
    variations: list[Variation],
    mover: Color,
    size: int,
    flat: bool = False,
) -> str:
    """
    Render variations as concatenated SGF game trees.

    Args:
        variations: Parsed variations, in display order.
        mover:      Color of the first move in every variation.
        size:       Board size used for the vertex conversion.
        flat:       Emit one setup node per variation instead of one node
                    per move.

    Returns:
        The SGF text; empty when there are no variations.
    """
    colors = (mover, mover.opponent)
    render = _flat_body if flat else _nested_body

    return "".join(
        f"(;C[{escape_text(annotation(variation))}]{render(variation, colors, size)})"
        for variation in variations
    )
