"""
Cargomon Test Configuration.

Pytest fixtures and fakes for the control loop collaborators.
Requires Python 3.11+.
"""

from io import StringIO
from pathlib import Path
from typing import Any

import pytest
from rich.console import Console

from pipeline.relay import OutputRelay
from pipeline.runner import ProcessResult
from utils.config import WatchConfig
from utils.errors import WatchChannelClosed
from watcher.file_watcher import ChangeEvent


DEMO_MANIFEST = '[package]\nname = "demo"\nversion = "0.1.0"\nedition = "2021"\n'


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def advance(self, seconds: float) -> None:
        self.now += seconds

    def __call__(self) -> float:
        return self.now


class FakeRunner:
    """
    Records invocations and returns canned results.

    The build command is recognised by name; anything else is a run.
    """

    def __init__(self, build_command: str = "cargo") -> None:
        self.build_command = build_command
        self.calls: list[tuple[str, list[str], Path | None]] = []
        self.build_result = ProcessResult(returncode=0)
        self.run_result = ProcessResult(returncode=0, stdout=b"Hello, world!\n")
        self.build_error: Exception | None = None
        self.run_error: Exception | None = None
        self.on_build: Any = None

    def run(self, command, args=(), cwd=None, timeout=None) -> ProcessResult:
        self.calls.append((str(command), list(args), cwd))
        if str(command) == self.build_command:
            if self.on_build is not None:
                self.on_build()
            if self.build_error is not None:
                raise self.build_error
            return self.build_result
        if self.run_error is not None:
            raise self.run_error
        return self.run_result

    @property
    def builds(self) -> list[tuple[str, list[str], Path | None]]:
        return [c for c in self.calls if c[0] == self.build_command]

    @property
    def runs(self) -> list[tuple[str, list[str], Path | None]]:
        return [c for c in self.calls if c[0] != self.build_command]


class FakeSource:
    """Event source fed from a list; exceptions in the list are raised."""

    def __init__(self, items: list[Any] | None = None) -> None:
        self.items = list(items or [])

    def receive(self, timeout: float | None = None) -> ChangeEvent | None:
        if not self.items:
            raise WatchChannelClosed("no more events")
        item = self.items.pop(0)
        if isinstance(item, Exception):
            raise item
        return item


@pytest.fixture
def clock() -> FakeClock:
    """Create a controllable clock."""
    return FakeClock()


@pytest.fixture
def runner() -> FakeRunner:
    """Create a recording runner."""
    return FakeRunner()


@pytest.fixture
def relay() -> OutputRelay:
    """Create a relay writing to in-memory consoles."""
    return OutputRelay(
        console=Console(file=StringIO(), no_color=True, width=200),
        error_console=Console(file=StringIO(), no_color=True, width=200),
    )


@pytest.fixture
def cargo_project(tmp_path: Path) -> Path:
    """Create a minimal project with a manifest."""
    project = tmp_path / "demo"
    (project / "src").mkdir(parents=True)
    (project / "Cargo.toml").write_text(DEMO_MANIFEST)
    (project / "src" / "main.rs").write_text('fn main() { println!("Hello, world!"); }\n')
    return project


@pytest.fixture
def watch_config(cargo_project: Path) -> WatchConfig:
    """Create a config for the sample project with a 1s debounce."""
    return WatchConfig(
        root_path=cargo_project,
        debounce_interval=1.0,
        project_root=cargo_project,
    )


def make_event(timestamp: float = 0.0, path: str = "src/main.rs") -> ChangeEvent:
    """Build a change event."""
    return ChangeEvent(timestamp=timestamp, path=Path(path), kind="modified")


def stdout_text(relay: OutputRelay) -> str:
    return relay.console.file.getvalue()


def stderr_text(relay: OutputRelay) -> str:
    return relay.error_console.file.getvalue()
