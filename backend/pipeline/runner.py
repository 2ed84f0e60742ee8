"""
Cargomon Process Runner.

Runs an external command to completion with both streams captured.
Requires Python 3.11+.
"""

import subprocess
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from utils.errors import ProcessTimeoutError, SpawnError
from utils.logger import LoggerMixin


@dataclass(frozen=True)
class ProcessResult:
    """Exit status and captured output of a finished process."""

    returncode: int
    stdout: bytes = b""
    stderr: bytes = b""

    @property
    def exit_success(self) -> bool:
        return self.returncode == 0


class ProcessRunner(LoggerMixin):
    """
    Synchronous subprocess execution.

    The calling thread blocks until the child exits. A process that cannot
    be launched raises SpawnError; one that runs and exits non-zero is a
    normal result with ``exit_success`` False.
    """

    def run(
        self,
        command: str | Path,
        args: Sequence[str] = (),
        cwd: Path | None = None,
        timeout: float | None = None,
    ) -> ProcessResult:
        """
        Run a command and capture its output.

        Args:
            command: Executable name or path
            args: Arguments passed to the executable
            cwd: Working directory for the child
            timeout: Seconds before the child is killed; None waits indefinitely

        Returns:
            ProcessResult with exit status and captured streams

        Raises:
            SpawnError: The process could not be launched
            ProcessTimeoutError: The timeout expired
        """
        argv = [str(command), *args]
        self.log.debug("process_starting", argv=argv, cwd=str(cwd) if cwd else None)

        try:
            completed = subprocess.run(
                argv,
                cwd=cwd,
                capture_output=True,
                timeout=timeout,
                check=False,
            )
        except subprocess.TimeoutExpired as e:
            self.log.warning("process_timed_out", argv=argv, timeout=timeout)
            raise ProcessTimeoutError(str(command), e.timeout) from e
        except OSError as e:
            self.log.error("process_spawn_failed", argv=argv, error=str(e))
            raise SpawnError(str(command), e) from e

        self.log.debug("process_finished", argv=argv, returncode=completed.returncode)
        return ProcessResult(
            returncode=completed.returncode,
            stdout=completed.stdout,
            stderr=completed.stderr,
        )
