"""Pytest configuration and fixtures for statusbar_policy_core tests."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest

from statusbar_policy_core.config import PolicyConfig
from statusbar_policy_core.display import BufferDisplay
from statusbar_policy_core.errors import PackageNotFoundError
from statusbar_policy_core.policy import PolicySources, StatusBarPolicy

INSTALLED_LABELS = {
    "com.example.terminal": "Terminal",
    "com.example.backup": "Backup",
}


class FakeTimerHandle:
    """Stand-in for asyncio.TimerHandle."""

    def __init__(
        self, when: float, callback: Callable[..., None], args: tuple[Any, ...]
    ) -> None:
        self.when = when
        self.callback = callback
        self.args = args
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class FakeLoop:
    """Manual-clock event loop exposing only what the policy schedules with."""

    def __init__(self) -> None:
        self.now = 0.0
        self._timers: list[FakeTimerHandle] = []
        self._soon: list[tuple[Callable[..., None], tuple[Any, ...]]] = []

    def call_later(
        self, delay: float, callback: Callable[..., None], *args: Any
    ) -> FakeTimerHandle:
        handle = FakeTimerHandle(self.now + delay, callback, args)
        self._timers.append(handle)
        return handle

    def call_soon_threadsafe(self, callback: Callable[..., None], *args: Any) -> None:
        self._soon.append((callback, args))

    def run_ready(self) -> None:
        """Run callbacks queued with call_soon_threadsafe, in order."""
        while self._soon:
            callback, args = self._soon.pop(0)
            callback(*args)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, firing due timers in time order."""
        target = self.now + seconds
        while True:
            due = [
                h for h in self._timers if not h.cancelled and h.when <= target
            ]
            if not due:
                break
            handle = min(due, key=lambda h: h.when)
            self._timers.remove(handle)
            self.now = handle.when
            handle.callback(*handle.args)
        self.now = target

    @property
    def pending_timers(self) -> int:
        return sum(1 for h in self._timers if not h.cancelled)


def _label_for(package: str) -> str:
    if package not in INSTALLED_LABELS:
        raise PackageNotFoundError(package)
    return INSTALLED_LABELS[package]


@pytest.fixture
def fake_loop() -> FakeLoop:
    return FakeLoop()


@pytest.fixture
def display() -> BufferDisplay:
    return BufferDisplay()


@pytest.fixture
def sources() -> PolicySources:
    """Collaborators describing an idle device with no signals active."""
    bluetooth = MagicMock()
    bluetooth.has_adapter.return_value = True
    bluetooth.get_adapter_state.return_value = "off"
    bluetooth.get_connection_state.return_value = "disconnected"

    audio = MagicMock()
    audio.get_ringer_mode.return_value = 2

    alarms = MagicMock()
    alarms.get_next_alarm.return_value = None

    settings = MagicMock()
    settings.show_alarm_icon.return_value = None

    users = MagicMock()
    users.current_user_id.return_value = 0

    subscriptions = MagicMock()
    subscriptions.slot_for_subscription.side_effect = lambda sub_id: sub_id - 1

    storage = MagicMock()
    storage.get_volumes.return_value = []

    cast = MagicMock()
    cast.get_cast_sessions.return_value = []

    hotspot = MagicMock()
    hotspot.is_hotspot_enabled.return_value = False

    elevated_access = MagicMock()
    elevated_access.get_packages_with_active_sessions.return_value = []

    eligibility = MagicMock()
    eligibility.is_widget_enabled_for_user.return_value = True

    labels = MagicMock()
    labels.get_application_label.side_effect = _label_for

    identity = MagicMock()
    identity.clear_calling_identity.return_value = "caller-token"

    return PolicySources(
        bluetooth=bluetooth,
        audio=audio,
        alarms=alarms,
        settings=settings,
        users=users,
        subscriptions=subscriptions,
        storage=storage,
        cast=cast,
        hotspot=hotspot,
        elevated_access=elevated_access,
        eligibility=eligibility,
        labels=labels,
        identity=identity,
    )


@pytest.fixture
def config() -> PolicyConfig:
    return PolicyConfig(slot_count=2)


@pytest.fixture
def policy(
    display: BufferDisplay,
    sources: PolicySources,
    config: PolicyConfig,
    fake_loop: FakeLoop,
) -> StatusBarPolicy:
    """A policy that has not been started (empty initial state)."""
    return StatusBarPolicy(display, sources, config, loop=fake_loop)
