"""
Cargomon Executable Locator.

Derives the path of the build output from the project manifest.
Requires Python 3.11+.

The manifest is scanned line by line instead of parsed as TOML: the first
line starting with ``name =`` wins, wherever it sits. A ``name`` key under
another table, or a commented line, can therefore be picked up.
"""

import sys
from enum import Enum
from pathlib import Path, PurePath, PurePosixPath, PureWindowsPath

from utils.errors import ManifestMalformedError, ManifestNotFoundError

NAME_TOKEN = "name"
QUOTE_CHARS = "\"'"


class TargetPlatform(str, Enum):
    """Platform family the executable is built for."""

    UNIX = "unix"
    WINDOWS = "windows"

    @classmethod
    def current(cls) -> "TargetPlatform":
        """Platform of the running interpreter."""
        if sys.platform.startswith("win") or sys.platform == "cygwin":
            return cls.WINDOWS
        return cls.UNIX

    @property
    def executable_suffix(self) -> str:
        return ".exe" if self is TargetPlatform.WINDOWS else ""

    @property
    def path_class(self) -> type[PurePath]:
        return PureWindowsPath if self is TargetPlatform.WINDOWS else PurePosixPath


def _declared_name(line: str) -> str | None:
    """Return the raw value of a ``name = ...`` line, or None for other lines."""
    stripped = line.strip()
    if not stripped.startswith(NAME_TOKEN):
        return None
    rest = stripped[len(NAME_TOKEN):].lstrip()
    if not rest.startswith("="):
        return None
    return rest[1:]


def read_package_name(manifest_path: Path) -> str:
    """
    Read the package name declared in a manifest.

    Args:
        manifest_path: Path to the manifest file

    Returns:
        The package name

    Raises:
        ManifestNotFoundError: The file cannot be read
        ManifestMalformedError: No name declaration, or an empty one
    """
    manifest_path = Path(manifest_path)
    try:
        text = manifest_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise ManifestNotFoundError(manifest_path, f"cannot read manifest ({e})") from e

    for line in text.splitlines():
        value = _declared_name(line)
        if value is None:
            continue
        name = value.strip().strip(QUOTE_CHARS).strip()
        if not name:
            raise ManifestMalformedError(manifest_path, "package name is empty")
        return name

    raise ManifestMalformedError(manifest_path, "no package name declaration found")


def locate(
    manifest_path: Path,
    *,
    output_dir: str = "target",
    profile_dir: str = "debug",
    platform: TargetPlatform | None = None,
) -> PurePath:
    """
    Compute the path of the executable the build produces.

    The manifest is read on every call so a renamed package is picked up
    without restarting the watcher.

    Args:
        manifest_path: Path to the manifest file
        output_dir: Build output root, relative to the project root
        profile_dir: Build profile directory under the output root
        platform: Target platform, defaults to the current one

    Returns:
        Relative path ``<output_dir>/<profile_dir>/<name>[suffix]``

    Raises:
        ManifestNotFoundError: The manifest cannot be read
        ManifestMalformedError: The manifest declares no usable name
    """
    platform = platform or TargetPlatform.current()
    package_name = read_package_name(manifest_path)
    return platform.path_class(
        output_dir, profile_dir, package_name + platform.executable_suffix
    )
