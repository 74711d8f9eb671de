"""Tests for the indicator store."""

from __future__ import annotations

from unittest.mock import MagicMock

import pytest

from statusbar_policy_core.display import BufferDisplay, IndicatorCommand
from statusbar_policy_core.errors import DisplayError
from statusbar_policy_core.indicators import (
    Indicator,
    IndicatorStore,
    IndicatorUpdate,
    sim_error_indicator,
)


class TestIndicatorStoreSet:
    """Tests for IndicatorStore.set()."""

    def test_first_write_emits_command(self):
        """Test a never-written name always reaches the display."""
        display = BufferDisplay()
        store = IndicatorStore(display)

        assert store.set("tty", False, "stat_sys_tty_mode") is True
        assert display.commands == [
            IndicatorCommand("tty", False, "stat_sys_tty_mode", None)
        ]

    def test_identical_write_is_noop(self):
        """Test writing the current state again emits nothing."""
        display = BufferDisplay()
        store = IndicatorStore(display)

        store.set("bluetooth", True, "bt", "Bluetooth connected.")
        assert store.set("bluetooth", True, "bt", "Bluetooth connected.") is False
        assert len(display.commands) == 1

    def test_none_keeps_current_icon_and_description(self):
        """Test omitted icon and description keep the stored values."""
        display = BufferDisplay()
        store = IndicatorStore(display)

        store.set("zen", True, "zen_icon", "Priority only")
        store.set("zen", False)

        assert store.get("zen") == Indicator("zen", False, "zen_icon", "Priority only")
        assert display.last() == [
            IndicatorCommand("zen", False, "zen_icon", "Priority only")
        ]

    def test_visibility_change_emits(self):
        """Test toggling visibility emits a second command."""
        display = BufferDisplay()
        store = IndicatorStore(display)

        store.set("hotspot", False, "hs")
        store.set("hotspot", True)

        assert [c.visible for c in display.indicator_commands("hotspot")] == [
            False,
            True,
        ]

    def test_display_failure_leaves_state_unchanged(self):
        """Test a rejected command is not committed."""
        display = MagicMock()
        display.set_indicator.side_effect = DisplayError("renderer gone")
        store = IndicatorStore(display)

        with pytest.raises(DisplayError):
            store.set("cast", True, "cast_icon")

        assert store.get("cast") == Indicator("cast")
        assert "cast" not in store.snapshot()

    def test_failed_write_is_retried_next_time(self):
        """Test the same write is attempted again after a failure."""
        display = MagicMock()
        display.set_indicator.side_effect = [DisplayError("busy"), None]
        store = IndicatorStore(display)

        with pytest.raises(DisplayError):
            store.set("alarm-clock", True, "alarm")
        assert store.set("alarm-clock", True, "alarm") is True
        assert display.set_indicator.call_count == 2


class TestIndicatorStoreApply:
    """Tests for IndicatorStore.apply()."""

    def test_apply_forwards_fields(self):
        """Test apply writes the update's fields."""
        display = BufferDisplay()
        store = IndicatorStore(display)

        store.apply(IndicatorUpdate("volume", True, "vibrate", "Ringer vibrate."))

        assert store.get("volume").visible is True
        assert store.get("volume").description == "Ringer vibrate."

    def test_best_effort_swallows_display_error(self):
        """Test best-effort updates log and drop failures."""
        display = MagicMock()
        display.set_indicator.side_effect = DisplayError("no such slot")
        store = IndicatorStore(display)

        result = store.apply(IndicatorUpdate("headset", False, best_effort=True))

        assert result is False
        assert store.get("headset") == Indicator("headset")

    def test_regular_update_propagates_display_error(self):
        """Test non-best-effort failures reach the caller."""
        display = MagicMock()
        display.set_indicator.side_effect = DisplayError("no such slot")
        store = IndicatorStore(display)

        with pytest.raises(DisplayError):
            store.apply(IndicatorUpdate("headset", True, "mic"))


class TestIndicatorStoreRead:
    """Tests for reading indicator state."""

    def test_unknown_name_is_hidden(self):
        """Test unknown names read as hidden with no icon."""
        store = IndicatorStore(BufferDisplay())
        assert store.get("nope") == Indicator("nope", False, None, None)

    def test_snapshot_is_a_copy(self):
        """Test mutating a snapshot does not touch the store."""
        store = IndicatorStore(BufferDisplay())
        store.set("tty", True, "tty_icon")

        snapshot = store.snapshot()
        snapshot.clear()

        assert store.get("tty").visible is True

    def test_sim_error_indicator_name(self):
        """Test per-slot card error indicator naming."""
        assert sim_error_indicator(0) == "sim-card-io-error-slot-0"
        assert sim_error_indicator(1) == "sim-card-io-error-slot-1"
