"""
Tests for the Debouncer.

Requires Python 3.11+.
"""

import pytest

from watcher.debouncer import DebounceState, Debouncer, accept


class TestAccept:
    """Test cases for the accept filter."""

    @pytest.mark.parametrize("interval", [0.0, 1.0, 2.0, 3600.0])
    def test_first_event_always_accepted(self, interval: float):
        """Test that no prior event means acceptance."""
        assert accept(now=5.0, last_accepted=None, interval=interval)

    @pytest.mark.parametrize("interval", [0.5, 1.0, 2.0])
    def test_gap_below_interval_rejected(self, interval: float):
        """Test that a gap shorter than the interval is rejected."""
        assert not accept(now=10.0 + interval * 0.5, last_accepted=10.0, interval=interval)

    def test_gap_equal_to_interval_accepted(self):
        """Test the boundary is inclusive."""
        assert accept(now=11.0, last_accepted=10.0, interval=1.0)

    def test_gap_above_interval_accepted(self):
        """Test that a long gap is accepted."""
        assert accept(now=15.0, last_accepted=10.0, interval=1.0)

    def test_zero_interval_accepts_everything(self):
        """Test that a zero interval disables suppression."""
        assert accept(now=10.0, last_accepted=10.0, interval=0.0)


class TestDebouncer:
    """Test cases for the stateful Debouncer."""

    def test_records_acceptance(self, clock):
        """Test that acceptance stores the clock reading."""
        state = DebounceState()
        debouncer = Debouncer(interval=1.0, state=state, clock=clock)

        assert debouncer.should_trigger()
        assert state.last_accepted_at == clock.now

    def test_rejection_leaves_state_untouched(self, clock):
        """Test that a suppressed trigger does not move the window."""
        debouncer = Debouncer(interval=1.0, clock=clock)
        debouncer.should_trigger()
        accepted_at = debouncer.state.last_accepted_at

        clock.advance(0.5)
        assert not debouncer.should_trigger()
        assert debouncer.state.last_accepted_at == accepted_at

        # Window is measured from the last accepted trigger, not the last seen
        clock.advance(0.5)
        assert debouncer.should_trigger()

    def test_burst_triggers_once(self, clock):
        """Test that a burst of closely spaced triggers fires once."""
        debouncer = Debouncer(interval=2.0, clock=clock)

        fired = 0
        for _ in range(10):
            if debouncer.should_trigger():
                fired += 1
            clock.advance(0.05)

        assert fired == 1
