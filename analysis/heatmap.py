"""
Heatmap extractor: reads the engine's policy grid from its diagnostics.

The "heatmap" GTP command makes the engine dump one row of integers per
board line to stderr:

      0   0   1   0 ...
      0  12 340   2 ...

We take the first such block, read one row per board line and scale every
value against the largest one so Sabaki gets intensities between 0 and 9.

The grid arrives on stderr asynchronously to the GTP response, so this
module also provides the counting barrier that waits for all rows.
"""

import math
import threading

from analysis.classify import LineKind, classify_line
from analysis.constants import HEATMAP_MAX_INTENSITY


def normalize(grid: list[list[int]]) -> list[list[int]]:
    """
    Scale raw values to intensities in [0, 9].

    intensity = floor(raw * 9.9 / max). A grid whose maximum is zero (or
    that has no cells) becomes all zeros.
    """
    peak = max((value for row in grid for value in row), default=0)
    if peak <= 0:
        return [[0 for _ in row] for row in grid]
    return [
        [math.floor(value * HEATMAP_MAX_INTENSITY / peak) for value in row]
        for row in grid
    ]


def extract_heatmap(text: str, size: int) -> list[list[int]]:
    """
    Extract and normalize the first grid block in a diagnostic log.

    Args:
        text: Captured stderr text.
        size: Board size, i.e. the number of rows to read.

    Returns:
        Up to `size` rows of intensities, or [] when the log has no grid.
        A block that ends early yields fewer rows.
    """
    lines = text.split("\n")
    start = next(
        (i for i, line in enumerate(lines) if classify_line(line) is LineKind.GRID_ROW),
        None,
    )
    if start is None:
        return []

    rows: list[list[int]] = []
    for line in lines[start:start + size]:
        if classify_line(line) is not LineKind.GRID_ROW:
            break
        rows.append([int(token) for token in line.split()])

    return normalize(rows)


# ---------------------------------------------------------------------------
# Synchronization
# ---------------------------------------------------------------------------


class CountdownLatch:
    """
    Blocks waiters until count_down() has been called `count` times.

    Attributes:
        count: Remaining signals before the latch opens.
    """

    def __init__(self, count: int) -> None:
        self.count = max(0, count)
        self._condition = threading.Condition()

    def count_down(self) -> None:
        with self._condition:
            if self.count > 0:
                self.count -= 1
                if self.count == 0:
                    self._condition.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        """
        Wait for the latch to open.

        Args:
            timeout: Seconds to wait, or None to wait forever.

        Returns:
            True if the latch opened, False if the timeout expired first.
        """
        with self._condition:
            return self._condition.wait_for(lambda: self.count == 0, timeout)


class GridRowBarrier:
    """
    Stderr listener that opens once `size` grid rows have been seen.

    Register it with the engine controller before sending "heatmap", then
    wait() after the GTP response has arrived.
    """

    def __init__(self, size: int) -> None:
        self.latch = CountdownLatch(size)

    def __call__(self, line: str) -> None:
        if classify_line(line) is LineKind.GRID_ROW:
            self.latch.count_down()

    def wait(self, timeout: float | None = None) -> bool:
        return self.latch.wait(timeout)
