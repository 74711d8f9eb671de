"""Tests for DebounceTimer."""

from __future__ import annotations

import asyncio
from unittest.mock import MagicMock

import pytest

from statusbar_policy_core.debounce import DebounceTimer


class TestDebounceTimer:
    """Tests for arming, re-arming and disarming."""

    def test_fires_after_delay(self, fake_loop):
        """Test the action runs once the delay elapses."""
        action = MagicMock()
        timer = DebounceTimer("cast", loop=fake_loop)

        timer.arm(action, 3.0)
        fake_loop.advance(2.999)
        action.assert_not_called()
        assert timer.pending is True

        fake_loop.advance(0.001)
        action.assert_called_once_with()
        assert timer.pending is False

    def test_rearm_replaces_pending_action(self, fake_loop):
        """Test re-arming restarts the delay and runs only the new action."""
        first = MagicMock()
        second = MagicMock()
        timer = DebounceTimer("cast", loop=fake_loop)

        timer.arm(first, 3.0)
        fake_loop.advance(2.0)
        timer.arm(second, 3.0)
        fake_loop.advance(2.0)

        first.assert_not_called()
        second.assert_not_called()

        fake_loop.advance(1.0)
        first.assert_not_called()
        second.assert_called_once_with()

    def test_disarm_cancels(self, fake_loop):
        """Test a disarmed action never runs."""
        action = MagicMock()
        timer = DebounceTimer("cast", loop=fake_loop)

        timer.arm(action, 1.0)
        timer.disarm()
        fake_loop.advance(10.0)

        action.assert_not_called()
        assert timer.pending is False
        assert fake_loop.pending_timers == 0

    def test_disarm_when_idle_is_noop(self, fake_loop):
        """Test disarming with nothing pending does nothing."""
        timer = DebounceTimer("cast", loop=fake_loop)
        timer.disarm()
        assert timer.pending is False

    @pytest.mark.asyncio
    async def test_uses_running_loop_by_default(self):
        """Test the timer schedules on the running loop when none is given."""
        fired = asyncio.Event()
        timer = DebounceTimer("cast")

        timer.arm(fired.set, 0.01)
        await asyncio.wait_for(fired.wait(), timeout=1.0)

        assert timer.pending is False
