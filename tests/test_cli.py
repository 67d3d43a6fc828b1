import io
import subprocess
import sys
from pathlib import Path

import pytest

from interface.cli import build_parser, exit_status, run_bridge_loop
from interface.config import BridgeConfig
from interface.gtp import Response
from interface.session import Session
from tests.conftest import FakeEngine


def test_options_precede_engine_arguments():
    args = build_parser().parse_args(
        ["--flat", "--labels", "/opt/leelaz", "-w", "network.gz", "--noponder"]
    )
    assert args.engine == "/opt/leelaz"
    assert args.engine_args == ["-w", "network.gz", "--noponder"]

    config = BridgeConfig.from_args(args)
    assert config.flat and config.labels
    assert not (config.black or config.white or config.heatmap)
    assert config.depth_limit == 21


def test_limitdepth_switch():
    args = build_parser().parse_args(["--limitdepth", "leelaz"])
    assert BridgeConfig.from_args(args).depth_limit == 7


def test_heatmap_timeout_must_be_positive():
    args = build_parser().parse_args(["--heatmap-timeout", "0", "leelaz"])
    with pytest.raises(ValueError):
        BridgeConfig.from_args(args)


def test_engine_path_is_required():
    with pytest.raises(SystemExit):
        build_parser().parse_args(["--flat"])


def test_bridge_loop_stops_after_quit(diagnostic_log):
    engine = FakeEngine(responses={"name": Response(content="Leela Zero")})
    session = Session(engine, BridgeConfig(), diagnostic_log)
    requests = io.StringIO(
        "1 name\n"
        "\n"
        "# a comment\n"
        "2 known_command sabaki-genmovelog\n"
        "3 quit\n"
        "4 name\n"
    )
    output = io.StringIO()

    run_bridge_loop(session, requests, output)

    assert output.getvalue() == "=1 Leela Zero\n\n=2 true\n\n=3\n\n"
    assert [c.name for c in engine.commands] == ["name", "quit"]


@pytest.mark.parametrize("returncode, status", [(0, 0), (3, 3), (None, 1), (-9, 137)])
def test_exit_status(returncode, status):
    assert exit_status(returncode) == status


def test_bridge_exits_when_engine_dies_while_idle():
    engine = Path(__file__).parent / "short_lived_engine.py"
    bridge = subprocess.Popen(
        [sys.executable, "-m", "interface.cli", sys.executable, str(engine)],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.PIPE,
        cwd=Path(__file__).parents[1],
    )
    try:
        # stdin stays open: the bridge must notice the exit by itself.
        assert bridge.wait(timeout=10) == 3
    finally:
        if bridge.poll() is None:
            bridge.kill()
        bridge.communicate(timeout=10)
