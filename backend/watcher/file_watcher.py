"""
Cargomon File Watcher.

Cross-platform file system monitoring using watchdog. Events are pushed
from the observer thread into a queue that the control loop drains.
Requires Python 3.11+.
"""

import fnmatch
import os
import queue
import time
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from watchdog.events import (
    DirCreatedEvent,
    DirDeletedEvent,
    DirModifiedEvent,
    DirMovedEvent,
    FileCreatedEvent,
    FileDeletedEvent,
    FileModifiedEvent,
    FileMovedEvent,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer

from utils.errors import WatchChannelClosed, WatchChannelError, WatchSetupError
from utils.logger import LoggerMixin


@dataclass(frozen=True)
class ChangeEvent:
    """Something changed under the watched tree at roughly ``timestamp``."""

    timestamp: float
    path: Path | None = None
    kind: str = "modified"  # created, modified, deleted, moved


_CLOSED = object()


class ChangeEventHandler(FileSystemEventHandler, LoggerMixin):
    """
    Converts watchdog events into ChangeEvents.

    Only content changes are forwarded: open/close notifications caused by
    the build tool reading sources are not changes. Paths under an ignored
    directory (the build output) or with a component matching an ignore
    pattern are dropped.
    """

    def __init__(
        self,
        root_path: Path,
        publish: Callable[[Any], None],
        ignore_patterns: list[str] | None = None,
        ignore_dirs: list[Path] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the handler.

        Args:
            root_path: Watched root, used to relativize paths
            publish: Receives each ChangeEvent or WatchChannelError
            ignore_patterns: Glob patterns matched against path components
            ignore_dirs: Directories whose whole subtree is dropped
            clock: Timestamp source for events
        """
        super().__init__()
        self._root_path = root_path
        self._publish = publish
        self._ignore_patterns = ignore_patterns or []
        self._ignore_dirs = [Path(d) for d in ignore_dirs or []]
        self._clock = clock

    def _should_ignore(self, path: str) -> bool:
        """Check if path is under an ignored directory or matches a pattern."""
        candidate = Path(path)
        if any(candidate.is_relative_to(d) for d in self._ignore_dirs):
            return True
        try:
            parts = candidate.relative_to(self._root_path).parts
        except ValueError:
            parts = candidate.parts
        return any(
            fnmatch.fnmatch(part, pattern)
            for part in parts
            for pattern in self._ignore_patterns
        )

    def _emit(self, path: str, kind: str) -> None:
        if self._should_ignore(path):
            return
        self.log.debug("change_observed", path=path, kind=kind)
        self._publish(ChangeEvent(timestamp=self._clock(), path=Path(path), kind=kind))

    def dispatch(self, event: FileSystemEvent) -> None:
        """Route an event, reporting handler failures into the channel."""
        try:
            super().dispatch(event)
        except Exception as e:
            self.log.error("event_dispatch_failed", error=str(e))
            self._publish(WatchChannelError(f"failed to process {event!r}: {e}"))

    def on_created(self, event: FileCreatedEvent | DirCreatedEvent) -> None:
        if isinstance(event, DirCreatedEvent):
            return
        self._emit(os.fsdecode(event.src_path), "created")

    def on_modified(self, event: FileModifiedEvent | DirModifiedEvent) -> None:
        if isinstance(event, DirModifiedEvent):
            return
        self._emit(os.fsdecode(event.src_path), "modified")

    def on_deleted(self, event: FileDeletedEvent | DirDeletedEvent) -> None:
        self._emit(os.fsdecode(event.src_path), "deleted")

    def on_moved(self, event: FileMovedEvent | DirMovedEvent) -> None:
        src_path = os.fsdecode(event.src_path)
        dest_path = os.fsdecode(event.dest_path)
        # Editors save by renaming a temp file over the original
        if self._should_ignore(dest_path):
            self._emit(src_path, "moved")
        else:
            self._emit(dest_path, "moved")


class ChangeWatcher(LoggerMixin):
    """
    Watches a directory tree and queues ChangeEvents for a consumer.

    Delivery is asynchronous: the watchdog observer thread pushes events,
    ``receive`` blocks until one is available. Events are not deduplicated.
    A watcher cannot be restarted once stopped.
    """

    def __init__(
        self,
        root_path: Path,
        recursive: bool = True,
        ignore_patterns: list[str] | None = None,
        ignore_dirs: list[Path] | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the watcher.

        Args:
            root_path: Root directory to watch
            recursive: Whether to watch subdirectories
            ignore_patterns: Glob patterns matched against path components
            ignore_dirs: Directories whose whole subtree is dropped
            clock: Timestamp source for events
        """
        self._root_path = Path(root_path).resolve()
        self._recursive = recursive
        self._ignore_patterns = ignore_patterns or []
        self._ignore_dirs = [Path(d).resolve() for d in ignore_dirs or []]
        self._queue: queue.Queue[Any] = queue.Queue()
        self._handler = ChangeEventHandler(
            root_path=self._root_path,
            publish=self._queue.put,
            ignore_patterns=self._ignore_patterns,
            ignore_dirs=self._ignore_dirs,
            clock=clock,
        )
        self._observer: Observer | None = None
        self._running = False
        self._closed = False
        self._stopped = False

    @property
    def root_path(self) -> Path:
        return self._root_path

    @property
    def is_running(self) -> bool:
        """Check if the watcher is running."""
        return self._running

    def start(self) -> None:
        """
        Establish the watch.

        Raises:
            WatchSetupError: If the root is invalid or the OS watch fails
        """
        if self._running:
            return
        if self._stopped:
            raise WatchSetupError("watcher cannot be restarted after stop")
        if not self._root_path.is_dir():
            raise WatchSetupError(f"watch path is not a directory: {self._root_path}")

        observer = Observer()
        try:
            observer.schedule(
                self._handler,
                str(self._root_path),
                recursive=self._recursive,
            )
            observer.start()
        except OSError as e:
            raise WatchSetupError(f"cannot watch {self._root_path}: {e}") from e

        self._observer = observer
        self._running = True
        self.log.info(
            "file_watcher_started",
            path=str(self._root_path),
            recursive=self._recursive,
            ignore_patterns=self._ignore_patterns,
            ignore_dirs=[str(d) for d in self._ignore_dirs],
        )

    def stop(self) -> None:
        """Stop watching and close the event channel."""
        if not self._running:
            return

        if self._observer is not None:
            self._observer.stop()
            self._observer.join(timeout=5.0)
            self._observer = None

        self._running = False
        self._stopped = True
        self._queue.put(_CLOSED)
        self.log.info("file_watcher_stopped")

    def receive(self, timeout: float | None = None) -> ChangeEvent | None:
        """
        Take the next event, blocking until one arrives.

        Args:
            timeout: Seconds to wait; None waits indefinitely

        Returns:
            The next ChangeEvent, or None if the timeout expired

        Raises:
            WatchChannelError: The notification source reported an error
            WatchChannelClosed: The watcher stopped and all events were taken
        """
        if self._closed:
            raise WatchChannelClosed("event channel is closed")

        try:
            item = self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

        if item is _CLOSED:
            self._closed = True
            raise WatchChannelClosed("event channel is closed")
        if isinstance(item, WatchChannelError):
            raise item
        return item

    def events(self) -> Iterator[ChangeEvent]:
        """Yield events until the channel closes."""
        while True:
            try:
                event = self.receive()
            except WatchChannelClosed:
                return
            if event is not None:
                yield event

    def __enter__(self) -> "ChangeWatcher":
        """Context manager entry."""
        self.start()
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit."""
        self.stop()
