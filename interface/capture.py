"""
Diagnostic log capture for the engine's stderr stream.

A single DiagnosticLog listens to every stderr line. It relays lines to the
bridge's own stderr so the user still sees the engine's output, and while
capturing it also buffers them for the parsers. Relay and capture are
independent: the heatmap step run inside "sabaki-genmovelog" captures with
relay switched off so the grid is not printed twice.
"""

import sys
from typing import TextIO


class DiagnosticLog:
    """
    Stderr listener that buffers lines between start() and stop().

    Attributes:
        relay:  Whether incoming lines are echoed to `output`.
        output: Stream used for relaying (the bridge's stderr by default).
    """

    def __init__(self, output: TextIO | None = None, relay: bool = True) -> None:
        self.relay = relay
        self.output = output if output is not None else sys.stderr
        self._lines: list[str] = []
        self._capturing = False

    def start(self) -> None:
        """Clear the buffer and begin capturing."""
        self._lines = []
        self._capturing = True

    def stop(self) -> None:
        """Stop capturing; the buffer keeps its contents until the next start()."""
        self._capturing = False

    @property
    def is_capturing(self) -> bool:
        return self._capturing

    @property
    def text(self) -> str:
        """Snapshot of the captured lines, newline-terminated."""
        return "".join(f"{line}\n" for line in list(self._lines))

    def feed(self, line: str) -> None:
        """Handle one stderr line from the engine."""
        if self.relay:
            self.output.write(f"{line}\n")
            self.output.flush()
        if self._capturing:
            self._lines.append(line)
