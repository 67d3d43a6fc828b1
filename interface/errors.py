"""Exceptions raised by the bridge itself (engine GTP errors are never raised)."""


class BridgeError(Exception):
    """Base class for bridge failures."""


class EngineExited(BridgeError):
    """
    Raised when the engine process ends while a response is awaited.

    Attributes:
        returncode: The engine's exit status, or None if it is not known yet.
    """

    def __init__(self, returncode: int | None) -> None:
        super().__init__(f"engine exited with status {returncode}")
        self.returncode = returncode
