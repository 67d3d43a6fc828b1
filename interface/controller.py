"""
Engine subprocess controller.

Runs the GTP engine as a child process and owns its three pipes:

    stdin  — commands, one line each, flushed immediately
    stdout — GTP response frames, read by a daemon thread into a queue
    stderr — free-form diagnostics, read by a second daemon thread and
             fanned out line by line to registered listeners

Threading model:
    send_command() runs on the caller's thread and blocks until the matching
    response frame arrives. The stderr thread keeps calling listeners while
    a command is in flight, which is what the heatmap barrier relies on.
    Listeners run on the stderr thread and must not block. drain_stderr()
    lets a caller wait for diagnostics that trail a response, and a third
    daemon thread reports the engine's exit through on_exit.
"""

import logging
import queue
import subprocess
import threading
import time
from collections.abc import Callable

from interface.errors import EngineExited
from interface.gtp import Command, Response

_log = logging.getLogger(__name__)

StderrListener = Callable[[str], None]
ExitHandler = Callable[[int], None]


class EngineController:
    """
    Spawns the engine and exchanges GTP frames with it.

    Attributes:
        path:    Engine executable.
        args:    Engine arguments.
        process:      The running child process, or None before start().
        stderr_quiet: Seconds without a stderr line after which drain_stderr()
                      considers the reader caught up.
        on_exit:      Called with the exit status, on a watcher thread, once the
                      engine process has ended.
    """

    def __init__(
        self,
        path: str,
        args: list[str] | None = None,
        stderr_quiet: float = 0.1,
        on_exit: ExitHandler | None = None,
    ) -> None:
        self.path = path
        self.args = list(args or [])
        self.stderr_quiet = stderr_quiet
        self.on_exit = on_exit
        self.process: subprocess.Popen | None = None
        self._responses: queue.Queue[Response | None] = queue.Queue()
        self._listeners: list[StderrListener] = []
        self._listeners_lock = threading.Lock()
        self._stderr_activity = threading.Condition()
        self._stderr_last = time.monotonic()
        self._stderr_closed = False

    # -----------------------------------------------------------------------
    # Lifecycle
    # -----------------------------------------------------------------------

    def start(self) -> None:
        """Launch the engine, its two pipe reader threads and the exit watcher."""
        _log.debug("starting engine: %s %s", self.path, " ".join(self.args))
        self.process = subprocess.Popen(
            [self.path, *self.args],
            stdin=subprocess.PIPE,
            stdout=subprocess.PIPE,
            stderr=subprocess.PIPE,
            text=True,
            bufsize=1,
        )
        threading.Thread(target=self._read_stdout, daemon=True).start()
        threading.Thread(target=self._read_stderr, daemon=True).start()
        threading.Thread(target=self._watch_exit, daemon=True).start()

    def stop(self, timeout: float = 5.0) -> int | None:
        """
        Close the engine's stdin and wait for it to exit.

        The engine is terminated if it is still running after `timeout`
        seconds.

        Returns:
            The engine's exit status.
        """
        if self.process is None:
            return None
        try:
            self.process.stdin.close()
        except OSError:
            pass
        try:
            self.process.wait(timeout=timeout)
        except subprocess.TimeoutExpired:
            _log.warning("engine did not exit after %.1fs, terminating", timeout)
            self.process.terminate()
            self.process.wait(timeout=timeout)
        return self.process.returncode

    @property
    def returncode(self) -> int | None:
        return None if self.process is None else self.process.poll()

    # -----------------------------------------------------------------------
    # Commands
    # -----------------------------------------------------------------------

    def send_command(self, command: Command) -> Response:
        """
        Send one command and block until its response frame arrives.

        Args:
            command: The command to send. Its id, if any, is sent along.

        Returns:
            The engine's response; GTP errors are returned, not raised.

        Raises:
            EngineExited: The engine closed stdout before responding.
        """
        if self.process is None:
            raise EngineExited(None)

        try:
            self.process.stdin.write(f"{command}\n")
            self.process.stdin.flush()
        except (BrokenPipeError, ValueError) as exc:
            raise EngineExited(self._wait_returncode()) from exc

        response = self._responses.get()
        if response is None:
            # Keep the end-of-stream marker for any later caller.
            self._responses.put(None)
            raise EngineExited(self._wait_returncode())
        return response

    # -----------------------------------------------------------------------
    # Stderr listeners
    # -----------------------------------------------------------------------

    def add_stderr_listener(self, listener: StderrListener) -> None:
        with self._listeners_lock:
            self._listeners.append(listener)

    def remove_stderr_listener(self, listener: StderrListener) -> None:
        with self._listeners_lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def emit_stderr(self, line: str) -> None:
        """Deliver one stderr line to every listener, in registration order."""
        with self._listeners_lock:
            listeners = list(self._listeners)
        for listener in listeners:
            listener(line)

    def drain_stderr(self, timeout: float = 5.0) -> None:
        """
        Wait until the stderr reader has delivered everything already written.

        Stdout and stderr are separate pipes, so a response frame can arrive
        before the diagnostics the engine printed ahead of it. The reader is
        considered caught up once no line has arrived for `stderr_quiet`
        seconds, counted from the moment this call starts.

        Args:
            timeout: Upper bound in seconds for an engine that never goes quiet.
        """
        started = time.monotonic()
        deadline = started + timeout
        with self._stderr_activity:
            while not self._stderr_closed:
                now = time.monotonic()
                idle = now - max(self._stderr_last, started)
                if idle >= self.stderr_quiet or now >= deadline:
                    return
                self._stderr_activity.wait(min(self.stderr_quiet - idle, deadline - now))

    # -----------------------------------------------------------------------
    # Reader threads
    # -----------------------------------------------------------------------

    def _read_stdout(self) -> None:
        frame: list[str] = []
        for raw_line in self.process.stdout:
            line = raw_line.rstrip("\r\n")
            if line.strip():
                frame.append(line)
            elif frame:
                self._responses.put(Response.from_lines(frame))
                frame = []
        _log.debug("engine stdout closed")
        self._responses.put(None)

    def _read_stderr(self) -> None:
        for raw_line in self.process.stderr:
            try:
                self.emit_stderr(raw_line.rstrip("\r\n"))
            except Exception:
                _log.exception("stderr listener failed")
            with self._stderr_activity:
                self._stderr_last = time.monotonic()
                self._stderr_activity.notify_all()
        with self._stderr_activity:
            self._stderr_closed = True
            self._stderr_activity.notify_all()

    def _watch_exit(self) -> None:
        returncode = self.process.wait()
        _log.debug("engine exited with status %d", returncode)
        if self.on_exit is not None:
            self.on_exit(returncode)

    def _wait_returncode(self) -> int | None:
        try:
            return self.process.wait(timeout=5.0)
        except subprocess.TimeoutExpired:
            return None
