"""Status bar policy coordinator.

This module provides the canonical entry point for platform glue. It handles:
- Signal listeners: re-query a collaborator and build a normalized event
- Serial dispatch of events through the rule table
- Applying rule results to the indicator store, debounce timer and widget
- Isolating rule failures so one indicator cannot block the rest

All dispatch happens on one event loop. Producers on other threads must use
``submit()``.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from . import indicators as ind
from .config import PolicyConfig
from .debounce import DebounceTimer
from .display import DisplayFacade
from .errors import StatusBarPolicyError
from .indicators import Indicator, IndicatorStore
from .policy_engine import (
    PolicyState,
    RuleResult,
    TimerAction,
    evaluate,
    initial_state,
)
from .signals import (
    AlarmChanged,
    BluetoothChanged,
    CastHideDue,
    CastSessionsChanged,
    ElevatedSessionsChanged,
    HeadsetPlugChanged,
    HeadsetPlugState,
    HotspotChanged,
    InterruptionMode,
    InterruptionModeChanged,
    RingerMode,
    RingerModeChanged,
    SignalEvent,
    SignalKind,
    SimCardState,
    SimStateChanged,
    StorageChanged,
    SyncStateChanged,
    TtyMode,
    TtyModeChanged,
    WidgetEligibilityChanged,
    bluetooth_connected,
    bluetooth_enabled,
    is_external_card_present,
)
from .sources import (
    AlarmSource,
    AudioSource,
    BluetoothSource,
    CastSource,
    ElevatedAccessSource,
    HotspotSource,
    IdentityProvider,
    NullIdentityProvider,
    PackageLabelResolver,
    SettingsSource,
    StorageSource,
    SubscriptionResolver,
    UserContext,
    WidgetEligibilitySource,
)
from .widget import WidgetPublisher

_LOGGER = logging.getLogger(__name__)

# Indicators installed hidden at startup, with their default icon key.
_INSTALLED_INDICATORS: tuple[tuple[str, str], ...] = (
    (ind.TTY, "tty"),
    (ind.CDMA_ERI, "cdma_eri"),
    (ind.ALARM_CLOCK, "alarm_clock"),
    (ind.SYNC_ACTIVE, "sync_active"),
    (ind.ZEN, "zen_important"),
    (ind.VOLUME, "volume_vibrate"),
    (ind.CAST, "cast"),
    (ind.ELEVATED_ACCESS, "elevated_access"),
    (ind.HOTSPOT, "hotspot"),
)


@dataclass
class PolicySources:
    """The platform collaborators the policy re-queries."""

    bluetooth: BluetoothSource
    audio: AudioSource
    alarms: AlarmSource
    settings: SettingsSource
    users: UserContext
    subscriptions: SubscriptionResolver
    storage: StorageSource
    cast: CastSource
    hotspot: HotspotSource
    elevated_access: ElevatedAccessSource
    eligibility: WidgetEligibilitySource
    labels: PackageLabelResolver
    identity: IdentityProvider = field(default_factory=NullIdentityProvider)


class StatusBarPolicy:
    """Derives the visible status indicators from platform signals.

    Usage:
        policy = StatusBarPolicy(display, sources, config)
        policy.start()
        policy.on_bluetooth_changed()
        policy.set_zen_mode(1)
        policy.on_headset_plug(1, True)
        policy.close()
    """

    def __init__(
        self,
        display: DisplayFacade,
        sources: PolicySources,
        config: PolicyConfig | None = None,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize policy.

        Args:
            display: Outbound display facade.
            sources: Platform collaborators.
            config: Policy configuration (defaults when omitted).
            loop: Owning event loop. Defaults to the running loop when
                ``start()`` is called from inside one.
        """
        self._config = config or PolicyConfig()
        self._sources = sources
        self._loop = loop

        self._store = IndicatorStore(display)
        self._state: PolicyState = initial_state(self._config)
        self._cast_timer = DebounceTimer("cast", loop=loop)
        self._widget = WidgetPublisher(
            self._config.widget_id,
            display,
            sources.labels,
            sources.identity,
            self._config.resources,
        )

    # -------------------------------------------------------------------------
    # Public API: Lifecycle
    # -------------------------------------------------------------------------

    def start(self) -> None:
        """Install every indicator hidden, then evaluate a fresh snapshot."""
        if self._loop is None:
            try:
                self._loop = asyncio.get_running_loop()
            except RuntimeError:
                _LOGGER.debug(
                    "Started outside an event loop; submit() and the cast "
                    "hide delay are unavailable"
                )
            else:
                self._cast_timer = DebounceTimer("cast", loop=self._loop)

        for name, icon_key in _INSTALLED_INDICATORS:
            try:
                self._store.set(name, False, self._config.resources.icon(icon_key))
            except Exception as err:
                _LOGGER.exception("[%s] Failed to install: %s", name, err)

        self.on_bluetooth_changed()
        self.on_alarm_icon_setting_changed()
        self.on_ringer_mode_changed()
        self._refresh(SignalKind.HOTSPOT, self._read_hotspot)
        self.on_cast_devices_changed()
        self.on_elevated_sessions_changed()
        self.on_storage_changed()

    def close(self) -> None:
        """Cancel any pending delayed work."""
        self._cast_timer.disarm()

    @property
    def config(self) -> PolicyConfig:
        return self._config

    @property
    def state(self) -> PolicyState:
        return self._state

    def indicator(self, name: str) -> Indicator:
        """Get the current state of a named indicator."""
        return self._store.get(name)

    def sim_state(self, slot: int) -> SimCardState:
        """Get the card state of a radio slot.

        Raises:
            IndexError: If the slot does not exist.
        """
        return self._state.sim_states[slot]

    # -------------------------------------------------------------------------
    # Public API: Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, event: SignalEvent) -> None:
        """Evaluate one normalized event and apply the result.

        Must run on the owning loop. Failures are logged, never raised.
        """
        try:
            result = evaluate(self._state, event, self._config)
        except Exception as err:
            _LOGGER.exception("[%s] Rule failed: %s", event.kind.value, err)
            return
        self._apply(event.kind, result)

    def submit(self, event: SignalEvent) -> None:
        """Queue an event from any thread onto the owning loop.

        Raises:
            StatusBarPolicyError: If the policy has no event loop.
        """
        if self._loop is None:
            raise StatusBarPolicyError("Policy is not bound to an event loop")
        self._loop.call_soon_threadsafe(self.dispatch, event)

    # -------------------------------------------------------------------------
    # Public API: Signal listeners
    # -------------------------------------------------------------------------

    def on_sim_state_changed(
        self,
        subscription_id: int,
        raw_state: str | None,
        lock_reason: str | None = None,
    ) -> None:
        """Card state broadcast for one subscription."""

        def read() -> SignalEvent:
            slot = self._sources.subscriptions.slot_for_subscription(subscription_id)
            _LOGGER.debug(
                "Card state for subscription %s -> slot %s", subscription_id, slot
            )
            return SimStateChanged(
                slot, SimCardState.from_intent(raw_state, lock_reason)
            )

        self._refresh(SignalKind.SIM_STATE, read)

    def on_bluetooth_changed(self) -> None:
        """Adapter or connection state changed."""
        self._refresh(SignalKind.BLUETOOTH, self._read_bluetooth)

    def set_zen_mode(self, mode: Any) -> None:
        """Interruption mode was set (0 all, 1 important, 2 none)."""

        def read() -> SignalEvent:
            return InterruptionModeChanged(
                InterruptionMode.from_raw(mode),
                RingerMode.from_raw(self._sources.audio.get_ringer_mode()),
            )

        self._refresh(SignalKind.INTERRUPTION_MODE, read)

    def on_ringer_mode_changed(self) -> None:
        def read() -> SignalEvent:
            return RingerModeChanged(
                RingerMode.from_raw(self._sources.audio.get_ringer_mode())
            )

        self._refresh(SignalKind.RINGER_MODE, read)

    def on_alarm_changed(self) -> None:
        """Next scheduled alarm changed."""
        self._refresh(SignalKind.ALARM, self._read_alarm)

    def on_user_switched(self) -> None:
        """Foreground user changed; the next alarm is per user."""
        self._refresh(SignalKind.ALARM, self._read_alarm)

    def on_alarm_icon_setting_changed(self) -> None:
        self._refresh(SignalKind.ALARM, self._read_alarm)

    def on_sync_state_changed(self, active: bool) -> None:
        self.dispatch(SyncStateChanged(bool(active)))

    def on_tty_mode_changed(self, mode: Any) -> None:
        self.dispatch(TtyModeChanged(TtyMode.from_raw(mode)))

    def on_storage_changed(self) -> None:
        """Storage volume state changed.

        Only listened to when the sd-card-absent indicator is enabled.
        """
        if not self._config.show_sd_card_absent_indicator:
            return
        self._refresh(SignalKind.STORAGE, self._read_storage)

    def on_cast_devices_changed(self) -> None:
        """Mirroring session list changed."""
        self._refresh(SignalKind.CAST_SESSIONS, self._read_cast)

    def on_elevated_sessions_changed(self) -> None:
        self._refresh(
            SignalKind.ELEVATED_SESSIONS,
            lambda: self._read_elevated_access(ElevatedSessionsChanged),
        )

    def on_widget_eligibility_changed(self) -> None:
        self._refresh(
            SignalKind.WIDGET_ELIGIBILITY,
            lambda: self._read_elevated_access(WidgetEligibilityChanged),
        )

    def on_hotspot_changed(self, enabled: bool) -> None:
        self.dispatch(HotspotChanged(bool(enabled)))

    def on_headset_plug(self, state: Any, has_microphone: bool) -> None:
        """Accessory plug change (state 0 unplugged, 1 plugged)."""
        self.dispatch(
            HeadsetPlugChanged(HeadsetPlugState.from_raw(state), bool(has_microphone))
        )

    # -------------------------------------------------------------------------
    # Internal: Applying results
    # -------------------------------------------------------------------------

    def _apply(self, kind: SignalKind, result: RuleResult) -> None:
        for update in result.updates:
            try:
                self._store.apply(update)
            except Exception as err:
                _LOGGER.exception("[%s] Display update failed: %s", update.name, err)

        try:
            if result.timer is TimerAction.ARM:
                self._cast_timer.arm(
                    self._on_cast_hide_due, self._config.cast_hide_delay
                )
            elif result.timer is TimerAction.DISARM:
                self._cast_timer.disarm()
        except Exception as err:
            # Without a timer the hide is applied immediately.
            _LOGGER.exception("[%s] Failed to schedule hide: %s", kind.value, err)
            if result.timer is TimerAction.ARM:
                self._on_cast_hide_due()

        if result.widget is not None:
            try:
                self._widget.apply(result.widget)
            except Exception as err:
                _LOGGER.exception("[%s] Widget update failed: %s", kind.value, err)

    def _on_cast_hide_due(self) -> None:
        self.dispatch(CastHideDue())

    # -------------------------------------------------------------------------
    # Internal: Signal reads
    # -------------------------------------------------------------------------

    def _refresh(
        self, kind: SignalKind, read: Callable[[], SignalEvent | None]
    ) -> None:
        """Re-query a collaborator and dispatch the resulting event."""
        try:
            event = read()
        except Exception as err:
            _LOGGER.exception("[%s] Failed to read signal: %s", kind.value, err)
            return
        if event is not None:
            self.dispatch(event)

    def _read_bluetooth(self) -> SignalEvent:
        bluetooth = self._sources.bluetooth
        if not bluetooth.has_adapter():
            return BluetoothChanged(
                adapter_present=False, enabled=False, connected=False
            )
        return BluetoothChanged(
            adapter_present=True,
            enabled=bluetooth_enabled(bluetooth.get_adapter_state()),
            connected=bluetooth_connected(bluetooth.get_connection_state()),
        )

    def _read_alarm(self) -> SignalEvent:
        user_id = self._sources.users.current_user_id()
        setting = self._sources.settings.show_alarm_icon()
        return AlarmChanged(
            alarm_scheduled=self._sources.alarms.get_next_alarm(user_id) is not None,
            icon_enabled=True if setting is None else bool(setting),
        )

    def _read_storage(self) -> SignalEvent:
        volumes = self._sources.storage.get_volumes()
        return StorageChanged(
            is_external_card_present(volumes, self._config.sd_card_keyword)
        )

    def _read_cast(self) -> SignalEvent:
        return CastSessionsChanged(tuple(self._sources.cast.get_cast_sessions()))

    def _read_hotspot(self) -> SignalEvent:
        return HotspotChanged(bool(self._sources.hotspot.is_hotspot_enabled()))

    def _read_elevated_access(
        self, event_type: type[ElevatedSessionsChanged | WidgetEligibilityChanged]
    ) -> SignalEvent:
        user_id = self._sources.users.current_user_id()
        packages = tuple(
            self._sources.elevated_access.get_packages_with_active_sessions()
        )
        eligible = bool(self._sources.eligibility.is_widget_enabled_for_user(user_id))
        return event_type(packages=packages, eligible=eligible, user_id=user_id)
