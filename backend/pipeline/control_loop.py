"""
Cargomon Control Loop.

Receives change events, debounces them, and runs the build-then-run
pipeline one cycle at a time.
Requires Python 3.11+.
"""

import time
from collections.abc import Callable
from pathlib import Path
from typing import Protocol

from pipeline.locator import TargetPlatform, locate
from pipeline.models import (
    BuildOutcome,
    CycleReport,
    CycleResult,
    LoopState,
    RunOutcome,
)
from pipeline.relay import OutputRelay
from pipeline.runner import ProcessRunner
from utils.config import BuildSettings, WatchConfig
from utils.errors import (
    LocatorError,
    ProcessTimeoutError,
    SpawnError,
    WatchChannelClosed,
    WatchChannelError,
)
from utils.logger import LoggerMixin
from watcher.debouncer import DebounceState, Debouncer
from watcher.file_watcher import ChangeEvent


class EventSource(Protocol):
    """Anything the loop can block on for the next change event."""

    def receive(self, timeout: float | None = None) -> ChangeEvent | None: ...


class ControlLoop(LoggerMixin):
    """
    Orchestrates watcher, debouncer, runner and locator.

    Single-threaded: an event arriving mid-pipeline waits in the source
    until the current cycle finishes, and is then judged by the debounce
    filter at the clock time it is taken. In-flight builds and runs are
    never cancelled.
    """

    def __init__(
        self,
        config: WatchConfig,
        source: EventSource,
        runner: ProcessRunner | None = None,
        relay: OutputRelay | None = None,
        build_settings: BuildSettings | None = None,
        run_timeout: float | None = None,
        clock: Callable[[], float] = time.monotonic,
        platform: TargetPlatform | None = None,
    ) -> None:
        """
        Initialize the control loop.

        Args:
            config: Resolved watch configuration
            source: Event source to block on
            runner: Process runner for build and run
            relay: Presentation layer for outcomes
            build_settings: Build command, manifest and output layout
            run_timeout: Seconds before the built program is killed
            clock: Clock used by the debounce filter
            platform: Target platform for the executable path
        """
        self._config = config
        self._source = source
        self._runner = runner or ProcessRunner()
        self._relay = relay or OutputRelay()
        self._build_settings = build_settings or BuildSettings()
        self._run_timeout = run_timeout
        self._platform = platform

        self._state = LoopState.IDLE
        self._debounce_state = DebounceState()
        self._debouncer = Debouncer(
            interval=config.debounce_interval,
            state=self._debounce_state,
            clock=clock,
        )

    @property
    def state(self) -> LoopState:
        return self._state

    @property
    def debounce_state(self) -> DebounceState:
        return self._debounce_state

    @property
    def manifest_path(self) -> Path:
        return self._config.project_root / self._build_settings.manifest_name

    def run_forever(self) -> None:
        """
        Process events until the channel closes.

        Per-cycle failures are reported and the loop keeps going.
        """
        self._relay.watching()
        self.log.info(
            "control_loop_started",
            root=str(self._config.root_path),
            debounce_interval=self._config.debounce_interval,
        )

        while True:
            try:
                event = self._source.receive()
            except WatchChannelError as e:
                self.log.warning("watch_channel_error", error=str(e))
                self._relay.watch_error(e)
                continue
            except WatchChannelClosed:
                self.log.info("event_channel_closed")
                return

            if event is not None:
                self.handle_event(event)

    def handle_event(self, event: ChangeEvent) -> CycleReport:
        """
        Gate one event through the debounce filter and run the pipeline.

        Args:
            event: The received change event

        Returns:
            CycleReport describing how the event was handled
        """
        if not self._debouncer.should_trigger():
            return CycleReport(result=CycleResult.SUPPRESSED)

        self.log.info(
            "change_accepted",
            path=str(event.path) if event.path else None,
            kind=event.kind,
        )
        self._relay.change_detected()
        try:
            report = self.run_pipeline()
        finally:
            self._state = LoopState.IDLE

        self.log.info("cycle_finished", result=report.result.value)
        self._relay.continuing()
        return report

    def run_pipeline(self) -> CycleReport:
        """
        Build, then run the executable if the build succeeded.

        Returns:
            CycleReport for the pipeline
        """
        build: BuildOutcome | None = None
        try:
            self._state = LoopState.BUILDING
            build = self._build()
            if not build.success:
                self._relay.build_failed(build.stderr)
                return CycleReport(result=CycleResult.BUILD_FAILED, build=build)

            self._relay.build_succeeded()
            self._state = LoopState.RUNNING
            executable = self._locate()
            run = self._run(executable)
        except LocatorError as e:
            self.log.error("executable_locate_failed", error=str(e))
            self._relay.locate_failed(e)
            return CycleReport(result=CycleResult.LOCATE_FAILED, build=build, error=str(e))
        except SpawnError as e:
            self.log.error("spawn_failed", command=e.command, error=str(e))
            self._relay.spawn_failed(e)
            return CycleReport(result=CycleResult.SPAWN_FAILED, build=build, error=str(e))
        except ProcessTimeoutError as e:
            self.log.error("process_timed_out", command=e.command, timeout=e.timeout)
            self._relay.timed_out(e)
            return CycleReport(result=CycleResult.TIMED_OUT, build=build, error=str(e))

        if run.success:
            self._relay.run_succeeded(run.output)
            result = CycleResult.RUN_SUCCEEDED
        else:
            self._relay.run_failed(run.output)
            result = CycleResult.RUN_FAILED
        return CycleReport(result=result, build=build, run=run, executable=executable)

    def _build(self) -> BuildOutcome:
        settings = self._build_settings
        process = self._runner.run(
            settings.command,
            [settings.subcommand],
            cwd=self._config.project_root,
            timeout=settings.timeout_seconds,
        )
        self.log.info("build_finished", success=process.exit_success)
        return BuildOutcome(success=process.exit_success, stderr=process.stderr)

    def _locate(self) -> Path:
        # Re-read every cycle so manifest edits apply without a restart
        relative = locate(
            self.manifest_path,
            output_dir=self._build_settings.output_dir,
            profile_dir=self._build_settings.profile_dir,
            platform=self._platform,
        )
        # Absolute, since the child runs with cwd=project_root
        return (self._config.project_root / relative).resolve()

    def _run(self, executable: Path) -> RunOutcome:
        process = self._runner.run(
            executable,
            cwd=self._config.project_root,
            timeout=self._run_timeout,
        )
        self.log.info("run_finished", executable=str(executable), success=process.exit_success)
        if process.exit_success:
            return RunOutcome(success=True, output=process.stdout)
        return RunOutcome(success=False, output=process.stderr)
