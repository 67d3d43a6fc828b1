"""
Session dispatcher: routes each client command to the engine or to the
bridge's own handlers.

Most commands go to the engine verbatim. The bridge intercepts:

    sabaki-genmovelog                 — variations, labels and heatmap for
                                        the last generated/played move
    known_command sabaki-genmovelog   — always "true"
    heatmap                           — the engine's policy grid, normalized

and watches a few others to keep its SessionState current (boardsize,
genmove, play) or to advertise itself (list_commands).

State machine:
    genmove, play and heatmap start diagnostic capture before the command
    reaches the engine (Idle -> Capturing). genmove and play stop it once
    the response is back and the trailing stderr lines have been drained
    (Capturing -> Idle). The heatmap path stops it after the grid-row
    barrier has been satisfied.
"""

import dataclasses
import logging
from dataclasses import dataclass
from collections.abc import Callable
from typing import Protocol

from analysis.constants import (
    DEFAULT_BOARD_SIZE,
    GENMOVELOG_COMMAND,
    MAX_BOARD_SIZE,
    MIN_BOARD_SIZE,
)
from analysis.heatmap import GridRowBarrier, extract_heatmap
from analysis.labels import assign_labels, format_labels
from analysis.sgf import Color, variations_to_sgf
from analysis.variations import parse_variations
from interface.capture import DiagnosticLog
from interface.config import (
    BridgeConfig,
    GenmoveLogPayload,
    HeatmapPayload,
    embed_payload,
)
from interface.controller import StderrListener
from interface.errors import BridgeError
from interface.gtp import Command, Response

_log = logging.getLogger(__name__)

CAPTURE_COMMANDS = ("genmove", "heatmap", "play")
MOVE_COMMANDS = ("genmove", "play")


class Engine(Protocol):
    """The part of EngineController the dispatcher depends on."""

    def send_command(self, command: Command) -> Response: ...

    def add_stderr_listener(self, listener: StderrListener) -> None: ...

    def remove_stderr_listener(self, listener: StderrListener) -> None: ...

    def drain_stderr(self) -> None: ...


# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class SessionState:
    """
    What the bridge knows about the game, updated from successful commands.

    Attributes:
        board_size: Current board size, set by "boardsize".
        mover:      Color of the last generated or played move.
    """

    board_size: int = DEFAULT_BOARD_SIZE
    mover: Color = Color.BLACK

    def with_board_size(self, size: int) -> "SessionState":
        return dataclasses.replace(self, board_size=size)

    def with_mover(self, color: Color) -> "SessionState":
        return dataclasses.replace(self, mover=color)


def next_state(state: SessionState, command: Command, response: Response) -> SessionState:
    """
    Compute the session state after the engine answered a command.

    Failed commands never change the state, and neither do arguments the
    bridge cannot read (a board size outside 1..25, an unknown color).

    Args:
        state:    State before the command.
        command:  The command that was delegated.
        response: The engine's response to it.

    Returns:
        The new state (the same object when nothing changed).
    """
    if response.error or not command.args:
        return state

    if command.name in MOVE_COMMANDS:
        color = Color.from_gtp(command.args[0])
        return state if color is None else state.with_mover(color)

    if command.name == "boardsize":
        try:
            size = int(command.args[0])
        except ValueError:
            return state
        if MIN_BOARD_SIZE <= size <= MAX_BOARD_SIZE:
            return state.with_board_size(size)

    return state


# ---------------------------------------------------------------------------
# Dispatcher
# ---------------------------------------------------------------------------


class Session:
    """
    One client session piped through one engine.

    Commands are handled strictly one at a time; handle() returns only when
    all engine round trips and extraction for the command are done.

    Attributes:
        engine: Controller used to talk to the engine.
        config: Feature switches.
        log:    Diagnostic capture, registered as the first stderr listener.
        state:  Current SessionState.
    """

    def __init__(
        self,
        engine: Engine,
        config: BridgeConfig | None = None,
        log: DiagnosticLog | None = None,
    ) -> None:
        self.engine = engine
        self.config = config or BridgeConfig()
        self.log = log or DiagnosticLog()
        self.state = SessionState()
        self.engine.add_stderr_listener(self.log.feed)

    def handle(self, line: str) -> str:
        """
        Handle one request line and return the complete response frame.

        Args:
            line: Raw request line from the client.

        Returns:
            The response, terminated by an empty line.

        Raises:
            EngineExited: The engine went away while a response was awaited.
        """
        command = Command.from_string(line)

        if command.name in CAPTURE_COMMANDS:
            self.log.start()

        if command.name == GENMOVELOG_COMMAND:
            response = self._intercepted(self.handle_genmovelog, command)
        elif command.name == "known_command" and command.args[:1] == [GENMOVELOG_COMMAND]:
            response = Response(content="true", id=command.id)
        elif command.name == "heatmap":
            response = self._intercepted(self.handle_heatmap, command)
        else:
            response = self.delegate(command)

        return response.to_frame()

    # -----------------------------------------------------------------------
    # Command handlers
    # -----------------------------------------------------------------------

    def delegate(self, command: Command) -> Response:
        """
        Forward a command verbatim and track its effect on the session.

        Errors are returned unchanged. A successful list_commands response
        gains the bridge's own command.
        """
        response = self.engine.send_command(command)

        if command.name in MOVE_COMMANDS:
            self.engine.drain_stderr()
            self.log.stop()

        self.state = next_state(self.state, command, response)

        if command.name == "list_commands" and not response.error:
            response = dataclasses.replace(
                response, content=f"{response.content}\n{GENMOVELOG_COMMAND}"
            )
        return response

    def handle_heatmap(self, command: Command) -> Response:
        """Answer "heatmap" with the normalized grid as a #sabaki payload."""
        response, grid = self.capture_heatmap()
        if response.error:
            return dataclasses.replace(response, id=command.id)
        return Response(content=embed_payload(HeatmapPayload(heatmap=grid)), id=command.id)

    def handle_genmovelog(self, command: Command) -> Response:
        """
        Answer "sabaki-genmovelog" from the log captured for the last move.

        Variations are only produced when the switches include the color
        that just moved; labels additionally need the labels switch and at
        least one variation. With the heatmap switch the engine is asked for
        its grid as well, without relaying the grid to stderr.
        """
        mover = self.state.mover
        size = self.state.board_size
        variations_sgf = ""
        labels = ""

        if self._includes(mover):
            text = self.log.text
            variations = parse_variations(text, self.config.depth_limit)
            variations_sgf = variations_to_sgf(variations, mover, size, flat=self.config.flat)
            if self.config.labels and variations:
                labels = format_labels(assign_labels(text, size))
            _log.debug("genmovelog: %d variations for %s", len(variations), mover.value)

        heatmap = None
        if self.config.heatmap:
            relay = self.log.relay
            self.log.relay = False
            try:
                _, heatmap = self.capture_heatmap()
            finally:
                self.log.relay = relay

        payload = GenmoveLogPayload(variations=variations_sgf, labels=labels, heatmap=heatmap)
        return Response(content=embed_payload(payload), id=command.id)

    # -----------------------------------------------------------------------
    # Internal helpers
    # -----------------------------------------------------------------------

    def capture_heatmap(self) -> tuple[Response, list[list[int]]]:
        """
        Ask the engine for its heatmap and extract the grid from stderr.

        The engine answers "heatmap" on stdout while the grid rows arrive on
        stderr, so a GridRowBarrier counting board_size rows is registered
        before the command is sent and waited on after the response is back.

        Returns:
            The engine's response and the normalized grid. The grid is empty
            when the engine failed or printed no grid.
        """
        size = self.state.board_size
        barrier = GridRowBarrier(size)

        self.log.start()
        self.engine.add_stderr_listener(barrier)
        try:
            response = self.engine.send_command(Command(name="heatmap"))
            if response.error:
                _log.warning("engine rejected heatmap: %s", response.content)
                return response, []
            if not barrier.wait(self.config.heatmap_timeout):
                _log.warning(
                    "heatmap: %d of %d rows after %.1fs, using what arrived",
                    size - barrier.latch.count,
                    size,
                    self.config.heatmap_timeout,
                )
        finally:
            self.engine.remove_stderr_listener(barrier)
            self.log.stop()

        return response, extract_heatmap(self.log.text, size)

    def _includes(self, color: Color) -> bool:
        if color is Color.BLACK:
            return self.config.black
        return self.config.white

    def _intercepted(
        self, handler: Callable[[Command], Response], command: Command
    ) -> Response:
        try:
            return handler(command)
        except BridgeError:
            raise
        except Exception:
            _log.exception("failed to handle %s", command.name)
            return Response(content="internal error", error=True, id=command.id)
