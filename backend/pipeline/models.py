"""
Cargomon Pipeline Data Models.

Outcomes produced by one build-then-run cycle.
Requires Python 3.11+.
"""

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


class LoopState(str, Enum):
    """Control loop states."""

    IDLE = "idle"
    BUILDING = "building"
    RUNNING = "running"


class CycleResult(str, Enum):
    """How a received change event ended."""

    SUPPRESSED = "suppressed"
    BUILD_FAILED = "build_failed"
    RUN_SUCCEEDED = "run_succeeded"
    RUN_FAILED = "run_failed"
    LOCATE_FAILED = "locate_failed"
    SPAWN_FAILED = "spawn_failed"
    TIMED_OUT = "timed_out"


@dataclass(frozen=True)
class BuildOutcome:
    """Result of one build attempt."""

    success: bool
    stderr: bytes = b""


@dataclass(frozen=True)
class RunOutcome:
    """Result of one program run: stdout on success, stderr on failure."""

    success: bool
    output: bytes = b""


@dataclass(frozen=True)
class CycleReport:
    """Summary of one control loop cycle."""

    result: CycleResult
    build: BuildOutcome | None = None
    run: RunOutcome | None = None
    executable: Path | None = None
    error: str | None = None

    @property
    def triggered(self) -> bool:
        """Check if the event started a pipeline."""
        return self.result is not CycleResult.SUPPRESSED
