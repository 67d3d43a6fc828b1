"""
Bridge constants: diagnostic markers, protocol names, and extraction limits.

Every magic string the parsers look for in the engine's stderr stream lives
here, so that supporting a new engine build only means touching this file.
The marker strings match what Leela and Leela Zero print after a search.
"""

# ---------------------------------------------------------------------------
# Diagnostic markers
# ---------------------------------------------------------------------------
# Leela prints "MC winrate=..." after a Monte-Carlo search; Leela Zero prints
# "NN eval=..." for its network evaluation summary. Branch lines only count
# once one of these has been seen.

ANALYSIS_MARKERS: tuple[str, ...] = ("MC winrate=", "NN eval=")

# Every candidate line reads like:
#   D4 ->     400 (V: 54.32%) (N: 12.3%) PV: D4 Q16 C3 D5 E6
BRANCH_MARKER: str = "->"
PV_MARKER: str = "PV:"

# ---------------------------------------------------------------------------
# Variation limits
# ---------------------------------------------------------------------------

MIN_VARIATION_LENGTH: int = 4  # Shallower lines are not worth showing
SHORT_DEPTH_LIMIT: int = 7     # --limitdepth
FULL_DEPTH_LIMIT: int = 21

LABEL_LETTERS: str = "ABCDEFGHIJKLMNOPQRSTUVWXYZ"

# ---------------------------------------------------------------------------
# Heatmap
# ---------------------------------------------------------------------------
# Raw policy values are scaled so the strongest point maps to 9.

HEATMAP_MAX_INTENSITY: float = 9.9

# ---------------------------------------------------------------------------
# Protocol
# ---------------------------------------------------------------------------

DEFAULT_BOARD_SIZE: int = 19
MIN_BOARD_SIZE: int = 1
MAX_BOARD_SIZE: int = 25

GENMOVELOG_COMMAND: str = "sabaki-genmovelog"
SABAKI_SENTINEL: str = "#sabaki"
