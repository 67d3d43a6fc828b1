"""
Command-line entry point: pipes a GTP client session through the engine.

Usage:
    leela-sabaki [--flat] [--heatmap] [--black] [--white] [--limitdepth]
                 [--labels] [--help] <path-to-leela> [leela-arguments...]

The bridge reads GTP commands from stdin and writes responses to stdout.
Bridge options must come before the engine path; everything after the path
is handed to the engine untouched ("--gtp" is added if missing).

Critical rule: stdout carries GTP responses only. The engine's diagnostics
are relayed to stderr, and the bridge's own log messages go there as well.
"""

import argparse
import contextlib
import logging
import os
import sys
import threading
from typing import TextIO

from pydantic import ValidationError

from interface.config import BridgeConfig
from interface.controller import EngineController
from interface.errors import EngineExited
from interface.gtp import Command
from interface.session import Session

_log = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="leela-sabaki",
        description=(
            "GTP bridge that adds Leela's variations, heatmap and move "
            "labels to Sabaki's sabaki-genmovelog command."
        ),
    )
    parser.add_argument(
        "--flat",
        action="store_true",
        help=(
            "Instead of appending variations as multiple moves, append one "
            "node per variation with the final board arrangement and move numbers."
        ),
    )
    parser.add_argument(
        "--heatmap",
        action="store_true",
        help="Visualize network probabilities as a heatmap after each generated move.",
    )
    parser.add_argument("--black", action="store_true", help="Include black variations.")
    parser.add_argument("--white", action="store_true", help="Include white variations.")
    parser.add_argument(
        "--limitdepth", action="store_true", help="Truncate variations to a depth of 7."
    )
    parser.add_argument(
        "--labels", action="store_true", help="Display labels for variations A, B, C, ..."
    )
    parser.add_argument(
        "--heatmap-timeout",
        type=float,
        default=None,
        metavar="SECONDS",
        help="Stop waiting for the heatmap grid after this many seconds (default: wait).",
    )
    parser.add_argument("--verbose", action="store_true", help="Log bridge activity to stderr.")
    parser.add_argument("engine", help="Path to the Leela executable.")
    parser.add_argument(
        "engine_args", nargs=argparse.REMAINDER, help="Arguments passed on to Leela."
    )
    return parser


def run_bridge_loop(
    session: Session,
    input_stream: TextIO | None = None,
    output: TextIO | None = None,
    busy: "threading.Lock | None" = None,
) -> None:
    """
    Read commands until "quit" or end of input and write every response.

    Blank and comment-only lines are ignored, as GTP requires. `busy` is
    held from the moment a command is read until its response is flushed.

    Raises:
        EngineExited: The engine went away in the middle of a command.
    """
    input_stream = input_stream or sys.stdin
    output = output or sys.stdout

    for raw_line in input_stream:
        command = Command.from_string(raw_line)
        if not command.name:
            continue

        with busy or contextlib.nullcontext():
            output.write(session.handle(raw_line))
            output.flush()

        if command.name == "quit":
            break


def exit_status(returncode: int | None) -> int:
    """
    Map the engine's return code to the bridge's exit status.

    An unknown status is reported as 1, and death by signal N as 128 + N,
    the way a shell reports it.
    """
    if returncode is None:
        return 1
    if returncode < 0:
        return 128 - returncode
    return returncode


def main(argv: list[str] | None = None) -> int:
    """Run the bridge and return the engine's exit status."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="leela-sabaki: %(name)s: %(message)s",
        stream=sys.stderr,
    )

    try:
        config = BridgeConfig.from_args(args)
    except ValidationError as exc:
        parser.error(str(exc))

    engine_args = list(args.engine_args)
    if "--gtp" not in engine_args:
        engine_args.append("--gtp")

    busy = threading.Lock()

    def engine_exited(returncode: int) -> None:
        # Let a response that is being written finish, then leave with the
        # engine's status even if the main thread is blocked reading stdin.
        with busy:
            _log.debug("engine exited with status %d, shutting down", returncode)
            logging.shutdown()
            os._exit(exit_status(returncode))

    controller = EngineController(args.engine, engine_args, on_exit=engine_exited)
    try:
        controller.start()
    except OSError as exc:
        parser.error(f"cannot start engine {args.engine!r}: {exc}")

    session = Session(controller, config)
    try:
        run_bridge_loop(session, busy=busy)
    except EngineExited as exc:
        _log.debug("%s", exc)
        return exit_status(exc.returncode)
    except KeyboardInterrupt:
        pass

    return exit_status(controller.stop())


if __name__ == "__main__":
    sys.exit(main())
