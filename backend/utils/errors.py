"""
Cargomon Error Types.

Requires Python 3.11+.
"""

from pathlib import Path


class CargomonError(Exception):
    """Base class for all Cargomon errors."""


class WatchSetupError(CargomonError):
    """The file watch could not be established. Fatal at startup."""


class WatchChannelError(CargomonError):
    """The notification source reported an error. The loop keeps receiving."""


class WatchChannelClosed(CargomonError):
    """The event channel is closed and drained. The loop exits."""


class LocatorError(CargomonError):
    """The executable path could not be derived from the manifest."""

    def __init__(self, manifest_path: Path, message: str) -> None:
        super().__init__(f"{manifest_path}: {message}")
        self.manifest_path = manifest_path


class ManifestNotFoundError(LocatorError):
    """The manifest file does not exist or cannot be read."""


class ManifestMalformedError(LocatorError):
    """The manifest has no usable package name declaration."""


class SpawnError(CargomonError):
    """A process could not be launched at all."""

    def __init__(self, command: str, cause: OSError) -> None:
        super().__init__(f"failed to launch {command!r}: {cause.strerror or cause}")
        self.command = command
        self.cause = cause


class ProcessTimeoutError(CargomonError):
    """A process exceeded its configured timeout and was killed."""

    def __init__(self, command: str, timeout: float) -> None:
        super().__init__(f"{command!r} did not finish within {timeout:g}s")
        self.command = command
        self.timeout = timeout
