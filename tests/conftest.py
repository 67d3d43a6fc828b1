"""Shared fixtures: sample engine diagnostics and an in-process fake engine."""

import io
import json

import pytest

from analysis.constants import SABAKI_SENTINEL
from interface.capture import DiagnosticLog
from interface.gtp import Command, Response

GENMOVE_LOG = """\
Thinking at most 5.0 seconds...
 Q4 ->      3 (V: 10.00%) (N: 1.0%) PV: Q4 D16 R16 C4
NN eval=0.551234
Playouts: 1600, Win: 55.12%, PO/s: 400, PV: D4 Q16 C3 D5
  D4 ->     400 (V: 54.32%) (LCB: 50.10%) (N: 12.3%) PV: D4 Q16 C3 D5 E6
 Q16 ->     200 (V: 52.00%) (LCB: 48.00%) (N: 10.0%) PV: Q16 D4 R4 C16
  C3 ->       5 (V: 40.00%) (LCB: 30.00%) (N: 1.0%) PV: C3 D4
1603 visits, score 55.12% (from 54.90%) PV: D4 Q16 C3 D5

"""

HEATMAP_LOG_3 = """\
  0   5  10
 20  40   0
  0   0 100
pass: 0
winrate: 0.512345
"""


class FakeEngine:
    """
    Scripted stand-in for EngineController.

    Before answering a command, the fake "prints" the stderr lines scripted
    for that command name to every listener, like a real engine that writes
    its diagnostics before the GTP response.
    """

    def __init__(self, responses=None, stderr=None):
        self.responses = dict(responses or {})
        self.stderr = dict(stderr or {})
        self.commands: list[Command] = []
        self.listeners = []
        self.drains = 0

    def add_stderr_listener(self, listener):
        self.listeners.append(listener)

    def remove_stderr_listener(self, listener):
        self.listeners.remove(listener)

    def drain_stderr(self):
        self.drains += 1

    def send_command(self, command: Command) -> Response:
        self.commands.append(command)
        for line in self.stderr.get(command.name, "").splitlines():
            for listener in list(self.listeners):
                listener(line)
        response = self.responses.get(command.name, Response())
        return Response(content=response.content, error=response.error, id=command.id)


def decode_payload(frame: str) -> dict:
    """Pull the JSON object out of a "#sabaki" response frame."""
    assert SABAKI_SENTINEL in frame
    return json.loads(frame.split(SABAKI_SENTINEL, 1)[1])


@pytest.fixture
def relay_output():
    return io.StringIO()


@pytest.fixture
def diagnostic_log(relay_output):
    return DiagnosticLog(output=relay_output)


@pytest.fixture
def engine():
    return FakeEngine(
        responses={"genmove": Response(content="D4")},
        stderr={"genmove": GENMOVE_LOG, "heatmap": HEATMAP_LOG_3},
    )
