"""
Cargomon File Watcher Package.

File system monitoring and trigger debouncing.
Requires Python 3.11+.
"""

from watcher.file_watcher import ChangeEvent, ChangeWatcher
from watcher.debouncer import DebounceState, Debouncer, accept

__all__ = ["ChangeEvent", "ChangeWatcher", "DebounceState", "Debouncer", "accept"]
