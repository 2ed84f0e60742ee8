"""
Cargomon Pipeline Package.

Build-then-run orchestration: process runner, executable locator,
output relay and the control loop tying them together.
Requires Python 3.11+.
"""

from pipeline.control_loop import ControlLoop
from pipeline.locator import TargetPlatform, locate, read_package_name
from pipeline.models import BuildOutcome, CycleReport, CycleResult, LoopState, RunOutcome
from pipeline.relay import OutputRelay
from pipeline.runner import ProcessResult, ProcessRunner

__all__ = [
    "ControlLoop",
    "TargetPlatform",
    "locate",
    "read_package_name",
    "BuildOutcome",
    "CycleReport",
    "CycleResult",
    "LoopState",
    "RunOutcome",
    "OutputRelay",
    "ProcessResult",
    "ProcessRunner",
]
