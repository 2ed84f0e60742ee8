"""
Cargomon Debouncer.

Suppresses triggers that arrive within a minimum interval of the last
accepted one. A single save often produces several raw notifications
(temp file, rename, write), and each would otherwise rebuild.
Requires Python 3.11+.
"""

import time
from collections.abc import Callable
from dataclasses import dataclass

from utils.logger import LoggerMixin


def accept(now: float, last_accepted: float | None, interval: float) -> bool:
    """
    Decide whether a trigger at ``now`` should fire.

    Args:
        now: Current clock reading in seconds
        last_accepted: Clock reading of the last accepted trigger, None if none yet
        interval: Minimum seconds between accepted triggers

    Returns:
        True if the trigger should fire
    """
    if last_accepted is None:
        return True
    return now - last_accepted >= interval


@dataclass
class DebounceState:
    """Timestamp of the last accepted trigger."""

    last_accepted_at: float | None = None


class Debouncer(LoggerMixin):
    """
    Binds a DebounceState to an interval and a clock.

    The state object is handed in by the owner so it stays inspectable
    from outside; it is mutated only when a trigger is accepted.
    """

    def __init__(
        self,
        interval: float,
        state: DebounceState | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._interval = interval
        self._state = state if state is not None else DebounceState()
        self._clock = clock

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def state(self) -> DebounceState:
        return self._state

    def should_trigger(self) -> bool:
        """Evaluate the filter at the current clock time, recording acceptance."""
        now = self._clock()
        if not accept(now, self._state.last_accepted_at, self._interval):
            self.log.debug(
                "trigger_suppressed",
                since_last=round(now - self._state.last_accepted_at, 3),
                interval=self._interval,
            )
            return False

        self._state.last_accepted_at = now
        return True
