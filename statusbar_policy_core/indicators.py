"""Indicator catalogue and state store.

The store is the single source of truth for what the status display shows.
Every write is compared against the current state; only real changes reach
the display facade, and the store commits a change only after the facade
accepted it. The store has one writer (the policy's serial dispatch) and
no locking.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace

from .display import DisplayFacade

_LOGGER = logging.getLogger(__name__)

# --------------------------------------------------------------------------
# Indicator names
# --------------------------------------------------------------------------

TTY = "tty"
CDMA_ERI = "cdma-eri"
BLUETOOTH = "bluetooth"
ALARM_CLOCK = "alarm-clock"
SYNC_ACTIVE = "sync-active"
ZEN = "zen"
VOLUME = "volume"
CAST = "cast"
ELEVATED_ACCESS = "elevated-access"
HOTSPOT = "hotspot"
SD_CARD_ABSENT = "sd-card-absent"
HEADSET = "headset"


def sim_error_indicator(slot: int) -> str:
    """Name of the card-io-error indicator for a radio slot."""
    return f"sim-card-io-error-slot-{slot}"


@dataclass(frozen=True)
class Indicator:
    """Displayed state of one named indicator."""

    name: str
    visible: bool = False
    icon: str | None = None
    description: str | None = None


@dataclass(frozen=True)
class IndicatorUpdate:
    """A requested indicator write produced by a policy rule.

    ``icon`` and ``description`` of None keep the current value.
    ``best_effort`` updates log and drop display failures instead of
    raising.
    """

    name: str
    visible: bool
    icon: str | None = None
    description: str | None = None
    best_effort: bool = False


class IndicatorStore:
    """Holds the current state of every indicator and drives the display."""

    def __init__(self, display: DisplayFacade) -> None:
        self._display = display
        self._indicators: dict[str, Indicator] = {}

    def get(self, name: str) -> Indicator:
        """Return the current state; unknown names are hidden and empty."""
        return self._indicators.get(name) or Indicator(name=name)

    def snapshot(self) -> dict[str, Indicator]:
        """Return a copy of every indicator written so far."""
        return dict(self._indicators)

    def set(
        self,
        name: str,
        visible: bool,
        icon: str | None = None,
        description: str | None = None,
    ) -> bool:
        """Write an indicator, emitting a display command only on change.

        Returns:
            True if a command was sent, False if the write was a no-op.

        Raises:
            DisplayError: If the display facade rejects the command. The
                stored state is left unchanged.
        """
        current = self.get(name)
        updated = replace(
            current,
            visible=visible,
            icon=current.icon if icon is None else icon,
            description=current.description if description is None else description,
        )
        if updated == current and name in self._indicators:
            _LOGGER.debug("[%s] Unchanged, skipping", name)
            return False

        self._display.set_indicator(
            name, updated.visible, updated.icon, updated.description
        )
        self._indicators[name] = updated
        _LOGGER.debug(
            "[%s] visible=%s icon=%s", name, updated.visible, updated.icon
        )
        return True

    def apply(self, update: IndicatorUpdate) -> bool:
        """Apply a rule-produced update.

        Best-effort updates swallow display failures (logged as warnings).
        """
        args = (update.name, update.visible, update.icon, update.description)
        if not update.best_effort:
            return self.set(*args)
        try:
            return self.set(*args)
        except Exception as err:
            _LOGGER.warning("[%s] Best-effort update failed: %s", update.name, err)
            return False
