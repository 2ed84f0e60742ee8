"""
Tests for the Process Runner.

Uses the running interpreter as a portable child process.
Requires Python 3.11+.
"""

import os
import sys
from pathlib import Path

import pytest

from pipeline.runner import ProcessResult, ProcessRunner
from utils.errors import ProcessTimeoutError, SpawnError


@pytest.fixture
def runner() -> ProcessRunner:
    """Create a process runner."""
    return ProcessRunner()


def python(code: str) -> list[str]:
    return ["-c", code]


class TestProcessRunner:
    """Test cases for ProcessRunner."""

    def test_success_captures_stdout(self, runner: ProcessRunner):
        """Test a zero exit with captured stdout."""
        result = runner.run(sys.executable, python("print('hello')"))

        assert result.exit_success
        assert result.returncode == 0
        assert result.stdout.strip() == b"hello"

    def test_failure_captures_stderr(self, runner: ProcessRunner):
        """Test a non-zero exit is a result, not an exception."""
        code = "import sys; sys.stderr.write('error[E0001]'); sys.exit(101)"
        result = runner.run(sys.executable, python(code))

        assert not result.exit_success
        assert result.returncode == 101
        assert result.stderr == b"error[E0001]"

    def test_large_output_on_both_streams(self, runner: ProcessRunner):
        """Test both pipes are drained without deadlocking."""
        code = (
            "import sys; "
            "sys.stdout.write('o' * 300000); "
            "sys.stderr.write('e' * 300000)"
        )
        result = runner.run(sys.executable, python(code))

        assert result.exit_success
        assert len(result.stdout) == 300000
        assert len(result.stderr) == 300000

    def test_cwd(self, runner: ProcessRunner, tmp_path: Path):
        """Test the child runs in the requested directory."""
        result = runner.run(sys.executable, python("import os; print(os.getcwd())"), cwd=tmp_path)

        assert Path(result.stdout.decode().strip()).resolve() == tmp_path.resolve()

    def test_missing_binary_is_spawn_error(self, runner: ProcessRunner, tmp_path: Path):
        """Test that a missing executable raises SpawnError."""
        missing = tmp_path / "no-such-binary"
        with pytest.raises(SpawnError) as exc_info:
            runner.run(missing)

        assert exc_info.value.command == str(missing)
        assert isinstance(exc_info.value.cause, FileNotFoundError)

    @pytest.mark.skipif(os.name == "nt", reason="POSIX permission bits")
    def test_non_executable_is_spawn_error(self, runner: ProcessRunner, tmp_path: Path):
        """Test that a file without execute permission raises SpawnError."""
        script = tmp_path / "script"
        script.write_text("#!/bin/sh\necho hi\n")
        script.chmod(0o644)

        with pytest.raises(SpawnError):
            runner.run(script)

    def test_timeout(self, runner: ProcessRunner):
        """Test that an expired timeout kills the child and raises."""
        with pytest.raises(ProcessTimeoutError) as exc_info:
            runner.run(sys.executable, python("import time; time.sleep(10)"), timeout=0.2)

        assert exc_info.value.timeout == pytest.approx(0.2)


class TestProcessResult:
    """Test cases for ProcessResult."""

    def test_exit_success(self):
        """Test exit_success follows the return code."""
        assert ProcessResult(returncode=0).exit_success
        assert not ProcessResult(returncode=1).exit_success
        assert not ProcessResult(returncode=-9).exit_success
