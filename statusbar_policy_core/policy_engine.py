"""Aggregation policy rules.

This module folds normalized signal events into indicator updates. It does
NOT talk to the display - it only decides. Each rule receives the owned
``PolicyState`` by reference, records what it learned from the event, and
returns the indicator writes (plus any debounce or widget action) for the
caller to carry out.

Key properties:
- Deterministic: same state + event -> same result
- No I/O, no timers, no platform calls
- Unknown payload values were already normalized to safe defaults
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from enum import Enum

from . import indicators as ind
from .config import PolicyConfig
from .indicators import IndicatorUpdate
from .signals import (
    AlarmChanged,
    BluetoothChanged,
    CastHideDue,
    CastSessionsChanged,
    ElevatedAccessSnapshot,
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
)
from .widget import WidgetDecision, widget_should_exist

_LOGGER = logging.getLogger(__name__)


class CastIndicatorState(Enum):
    """Debounced cast indicator lifecycle."""

    HIDDEN = "hidden"
    VISIBLE = "visible"
    PENDING_HIDE = "pending_hide"


class TimerAction(Enum):
    """What the caller must do with the cast debounce timer."""

    NONE = "none"
    ARM = "arm"
    DISARM = "disarm"


@dataclass
class PolicyState:
    """Everything the policy has learned from past events.

    Attributes:
        sim_states: Per-slot card state; optimistic READY at construction.
        zen_mode: Current interruption mode.
        ringer_mode: Last known ringer mode.
        bluetooth_enabled: Whether the adapter is present and on.
        alarm_scheduled: Whether the current user has a next alarm.
        alarm_icon_enabled: User setting for the alarm icon.
        sd_card_present: Whether the external card is inserted.
        cast_state: Debounced cast indicator state.
        elevated_packages: Packages holding elevated sessions.
        widget_eligible: Whether the widget is enabled for the current user.
    """

    sim_states: list[SimCardState]
    zen_mode: InterruptionMode = InterruptionMode.ALL
    ringer_mode: RingerMode = RingerMode.NORMAL
    bluetooth_enabled: bool = False
    alarm_scheduled: bool = False
    alarm_icon_enabled: bool = True
    sd_card_present: bool = True
    cast_state: CastIndicatorState = CastIndicatorState.HIDDEN
    elevated_packages: tuple[str, ...] = ()
    widget_eligible: bool = False


def initial_state(config: PolicyConfig) -> PolicyState:
    """Fresh state for a newly started policy."""
    return PolicyState(sim_states=[SimCardState.READY] * config.slot_count)


@dataclass(frozen=True)
class RuleResult:
    """Output of one rule evaluation.

    Attributes:
        updates: Indicator writes, in order.
        timer: Cast debounce timer action.
        widget: Widget decision, for elevated-access rules only.
    """

    updates: list[IndicatorUpdate] = field(default_factory=list)
    timer: TimerAction = TimerAction.NONE
    widget: WidgetDecision | None = None


# --------------------------------------------------------------------------
# Rules
# --------------------------------------------------------------------------


def evaluate_tty(
    state: PolicyState, event: TtyModeChanged, config: PolicyConfig
) -> RuleResult:
    res = config.resources
    if event.mode != TtyMode.OFF:
        return RuleResult(
            [
                IndicatorUpdate(
                    ind.TTY, True, res.icon("tty"), res.description("tty_enabled")
                )
            ]
        )
    return RuleResult([IndicatorUpdate(ind.TTY, False)])


def evaluate_bluetooth(
    state: PolicyState, event: BluetoothChanged, config: PolicyConfig
) -> RuleResult:
    """Visible when the adapter is on; icon shows whether a device is connected.

    A missing adapter forces not-enabled.
    """
    res = config.resources
    state.bluetooth_enabled = event.adapter_present and event.enabled

    if event.adapter_present and event.connected:
        icon = res.icon("bluetooth_connected")
        description = res.description("bluetooth_connected")
    else:
        icon = res.icon("bluetooth")
        description = res.description("bluetooth_disconnected")

    return RuleResult(
        [IndicatorUpdate(ind.BLUETOOTH, state.bluetooth_enabled, icon, description)]
    )


def evaluate_alarm(
    state: PolicyState, event: AlarmChanged, config: PolicyConfig
) -> RuleResult:
    state.alarm_scheduled = event.alarm_scheduled
    state.alarm_icon_enabled = event.icon_enabled
    visible = state.alarm_scheduled and state.alarm_icon_enabled
    return RuleResult(
        [
            IndicatorUpdate(
                ind.ALARM_CLOCK, visible, config.resources.icon("alarm_clock")
            )
        ]
    )


def evaluate_sync(
    state: PolicyState, event: SyncStateChanged, config: PolicyConfig
) -> RuleResult:
    # Disabled at build time unless show_sync_icon is set.
    if not config.show_sync_icon:
        return RuleResult()
    return RuleResult(
        [
            IndicatorUpdate(
                ind.SYNC_ACTIVE, event.active, config.resources.icon("sync_active")
            )
        ]
    )


def evaluate_zen_volume(state: PolicyState, config: PolicyConfig) -> RuleResult:
    """Derive the coupled zen and volume indicators from the current state.

    Total silence suppresses the separate vibrate indicator.
    """
    res = config.resources
    updates: list[IndicatorUpdate] = []

    if state.zen_mode == InterruptionMode.NONE:
        updates.append(
            IndicatorUpdate(
                ind.ZEN, True, res.icon("zen_none"), res.description("zen_none")
            )
        )
    elif state.zen_mode == InterruptionMode.IMPORTANT:
        updates.append(
            IndicatorUpdate(
                ind.ZEN,
                True,
                res.icon("zen_important"),
                res.description("zen_important"),
            )
        )
    else:
        updates.append(IndicatorUpdate(ind.ZEN, False))

    if (
        state.zen_mode != InterruptionMode.NONE
        and state.ringer_mode == RingerMode.VIBRATE
    ):
        updates.append(
            IndicatorUpdate(
                ind.VOLUME,
                True,
                res.icon("volume_vibrate"),
                res.description("volume_vibrate"),
            )
        )
    else:
        updates.append(IndicatorUpdate(ind.VOLUME, False))

    return RuleResult(updates)


def evaluate_interruption_mode(
    state: PolicyState, event: InterruptionModeChanged, config: PolicyConfig
) -> RuleResult:
    state.zen_mode = event.mode
    state.ringer_mode = event.ringer_mode
    return evaluate_zen_volume(state, config)


def evaluate_ringer_mode(
    state: PolicyState, event: RingerModeChanged, config: PolicyConfig
) -> RuleResult:
    state.ringer_mode = event.ringer_mode
    return evaluate_zen_volume(state, config)


def evaluate_sim(
    state: PolicyState, event: SimStateChanged, config: PolicyConfig
) -> RuleResult:
    """Record a slot's card state; out-of-range slots are ignored."""
    if not 0 <= event.slot < len(state.sim_states):
        _LOGGER.debug("Ignoring card state for out-of-range slot %d", event.slot)
        return RuleResult()

    state.sim_states[event.slot] = event.state
    _LOGGER.debug("Slot %d card state: %s", event.slot, event.state.value)

    if not config.show_sim_error_indicator:
        return RuleResult()

    res = config.resources
    return RuleResult(
        [
            IndicatorUpdate(
                ind.sim_error_indicator(event.slot),
                event.state == SimCardState.CARD_IO_ERROR,
                res.icon("sim_error"),
                res.description("sim_error"),
            )
        ]
    )


def evaluate_storage(
    state: PolicyState, event: StorageChanged, config: PolicyConfig
) -> RuleResult:
    if not config.show_sd_card_absent_indicator:
        return RuleResult()
    state.sd_card_present = event.card_present
    return RuleResult(
        [
            IndicatorUpdate(
                ind.SD_CARD_ABSENT,
                not event.card_present,
                config.resources.icon("sd_card_absent"),
            )
        ]
    )


def evaluate_cast(
    state: PolicyState, event: CastSessionsChanged, config: PolicyConfig
) -> RuleResult:
    """Cast indicator state machine.

    HIDDEN -> VISIBLE immediately when casting starts.
    VISIBLE -> PENDING_HIDE when casting stops (arm timer, stay visible).
    PENDING_HIDE -> VISIBLE when casting resumes (disarm timer).
    PENDING_HIDE -> HIDDEN when the timer fires (see evaluate_cast_hide_due).
    """
    previous = state.cast_state
    res = config.resources

    if event.is_casting:
        state.cast_state = CastIndicatorState.VISIBLE
        timer = (
            TimerAction.DISARM
            if previous == CastIndicatorState.PENDING_HIDE
            else TimerAction.NONE
        )
        _LOGGER.debug("cast: %s -> %s", previous.value, state.cast_state.value)
        return RuleResult(
            [
                IndicatorUpdate(
                    ind.CAST, True, res.icon("cast"), res.description("casting")
                )
            ],
            timer=timer,
        )

    if previous == CastIndicatorState.HIDDEN:
        return RuleResult()

    # Re-arming while already pending restarts the delay.
    state.cast_state = CastIndicatorState.PENDING_HIDE
    _LOGGER.debug("cast: %s -> %s", previous.value, state.cast_state.value)
    return RuleResult(timer=TimerAction.ARM)


def evaluate_cast_hide_due(
    state: PolicyState, event: CastHideDue, config: PolicyConfig
) -> RuleResult:
    if state.cast_state != CastIndicatorState.PENDING_HIDE:
        _LOGGER.debug("cast: stale hide ignored in %s", state.cast_state.value)
        return RuleResult()
    state.cast_state = CastIndicatorState.HIDDEN
    _LOGGER.debug("cast: pending_hide -> hidden")
    return RuleResult([IndicatorUpdate(ind.CAST, False)])


def evaluate_elevated_access(
    state: PolicyState, event: ElevatedAccessSnapshot, config: PolicyConfig
) -> RuleResult:
    """Indicator follows sessions alone; the widget also needs eligibility.

    Either trigger re-evaluates both signals together.
    """
    state.elevated_packages = event.packages
    state.widget_eligible = event.eligible

    decision = WidgetDecision(
        should_exist=widget_should_exist(
            event.has_sessions,
            event.eligible,
            event.user_id == config.primary_user_id,
        ),
        packages=event.packages,
        user_id=event.user_id,
    )
    return RuleResult(
        [
            IndicatorUpdate(
                ind.ELEVATED_ACCESS,
                event.has_sessions,
                config.resources.icon("elevated_access"),
            )
        ],
        widget=decision,
    )


def evaluate_hotspot(
    state: PolicyState, event: HotspotChanged, config: PolicyConfig
) -> RuleResult:
    return RuleResult(
        [
            IndicatorUpdate(
                ind.HOTSPOT, event.enabled, config.resources.icon("hotspot")
            )
        ]
    )


def evaluate_headset(
    state: PolicyState, event: HeadsetPlugChanged, config: PolicyConfig
) -> RuleResult:
    """Unplug hides (best effort); plug shows the mic or no-mic icon."""
    if event.state == HeadsetPlugState.UNPLUGGED:
        return RuleResult([IndicatorUpdate(ind.HEADSET, False, best_effort=True)])
    if event.state == HeadsetPlugState.PLUGGED:
        key = "headset_mic" if event.has_microphone else "headset_no_mic"
        return RuleResult(
            [IndicatorUpdate(ind.HEADSET, True, config.resources.icon(key))]
        )
    return RuleResult()


# --------------------------------------------------------------------------
# Rule table
# --------------------------------------------------------------------------

# Rules take (PolicyState, <event type for the kind>, PolicyConfig).
Rule = Callable[..., RuleResult]

RULES: dict[SignalKind, Rule] = {
    SignalKind.TTY_MODE: evaluate_tty,
    SignalKind.BLUETOOTH: evaluate_bluetooth,
    SignalKind.ALARM: evaluate_alarm,
    SignalKind.SYNC_STATE: evaluate_sync,
    SignalKind.INTERRUPTION_MODE: evaluate_interruption_mode,
    SignalKind.RINGER_MODE: evaluate_ringer_mode,
    SignalKind.SIM_STATE: evaluate_sim,
    SignalKind.STORAGE: evaluate_storage,
    SignalKind.CAST_SESSIONS: evaluate_cast,
    SignalKind.CAST_HIDE_DUE: evaluate_cast_hide_due,
    SignalKind.ELEVATED_SESSIONS: evaluate_elevated_access,
    SignalKind.WIDGET_ELIGIBILITY: evaluate_elevated_access,
    SignalKind.HOTSPOT: evaluate_hotspot,
    SignalKind.HEADSET: evaluate_headset,
}


def evaluate(
    state: PolicyState, event: SignalEvent, config: PolicyConfig
) -> RuleResult:
    """Evaluate the rule registered for the event's kind."""
    return RULES[event.kind](state, event, config)
