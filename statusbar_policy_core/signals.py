"""Normalized signal events.

Signal listeners translate raw platform notifications into the events in
this module. Events are ecosystem-agnostic: raw strings and integers are
normalized here, and anything unrecognized maps to a safe default rather
than raising.

Every event type carries a ``kind`` tag; the policy dispatches on it through
a single rule table.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar

_LOGGER = logging.getLogger(__name__)


class SignalKind(Enum):
    """Tags for every normalized event the policy understands."""

    TTY_MODE = "tty_mode"
    BLUETOOTH = "bluetooth"
    ALARM = "alarm"
    SYNC_STATE = "sync_state"
    INTERRUPTION_MODE = "interruption_mode"
    RINGER_MODE = "ringer_mode"
    SIM_STATE = "sim_state"
    STORAGE = "storage"
    CAST_SESSIONS = "cast_sessions"
    CAST_HIDE_DUE = "cast_hide_due"
    ELEVATED_SESSIONS = "elevated_sessions"
    WIDGET_ELIGIBILITY = "widget_eligibility"
    HOTSPOT = "hotspot"
    HEADSET = "headset"


# --------------------------------------------------------------------------
# Normalized value types
# --------------------------------------------------------------------------


class SimCardState(Enum):
    """State of one physical radio card slot."""

    READY = "ready"
    ABSENT = "absent"
    CARD_IO_ERROR = "card_io_error"
    PIN_REQUIRED = "pin_required"
    PUK_REQUIRED = "puk_required"
    PERSONALIZATION_LOCKED = "personalization_locked"
    UNKNOWN = "unknown"

    @classmethod
    def from_intent(
        cls, raw_state: str | None, lock_reason: str | None = None
    ) -> SimCardState:
        """Map the raw broadcast state (and lock reason) to a card state.

        Platform values: ABSENT, CARD_IO_ERROR, READY, LOCKED (with lock
        reason PIN, PUK or a personalization reason). Everything else,
        including NOT_READY, IMSI and LOADED, is UNKNOWN.
        """
        if raw_state == "ABSENT":
            return cls.ABSENT
        if raw_state == "CARD_IO_ERROR":
            return cls.CARD_IO_ERROR
        if raw_state == "READY":
            return cls.READY
        if raw_state == "LOCKED":
            if lock_reason == "PIN":
                return cls.PIN_REQUIRED
            if lock_reason == "PUK":
                return cls.PUK_REQUIRED
            return cls.PERSONALIZATION_LOCKED
        return cls.UNKNOWN


class InterruptionMode(Enum):
    """Do-not-disturb mode."""

    ALL = "all"
    IMPORTANT = "important"
    NONE = "none"

    @classmethod
    def from_raw(cls, value: Any) -> InterruptionMode:
        """Parse a platform integer (0/1/2) or name; unknown means ALL."""
        if isinstance(value, cls):
            return value
        mapping: dict[Any, InterruptionMode] = {
            0: cls.ALL,
            1: cls.IMPORTANT,
            2: cls.NONE,
            "all": cls.ALL,
            "important": cls.IMPORTANT,
            "none": cls.NONE,
        }
        key = value.lower() if isinstance(value, str) else value
        if isinstance(key, bool) or key not in mapping:
            _LOGGER.debug("Unknown interruption mode %r, using ALL", value)
            return cls.ALL
        return mapping[key]


class RingerMode(Enum):
    """Ringer sub-state of the audio stack."""

    SILENT = "silent"
    VIBRATE = "vibrate"
    NORMAL = "normal"

    @classmethod
    def from_raw(cls, value: Any) -> RingerMode:
        """Parse a platform integer (0/1/2) or name; unknown means NORMAL."""
        if isinstance(value, cls):
            return value
        mapping: dict[Any, RingerMode] = {
            0: cls.SILENT,
            1: cls.VIBRATE,
            2: cls.NORMAL,
            "silent": cls.SILENT,
            "vibrate": cls.VIBRATE,
            "normal": cls.NORMAL,
        }
        key = value.lower() if isinstance(value, str) else value
        if isinstance(key, bool) or key not in mapping:
            _LOGGER.debug("Unknown ringer mode %r, using NORMAL", value)
            return cls.NORMAL
        return mapping[key]


class TtyMode(Enum):
    """Teletypewriter mode."""

    OFF = 0
    FULL = 1
    HCO = 2
    VCO = 3

    @classmethod
    def from_raw(cls, value: Any) -> TtyMode:
        """Parse a platform integer; unknown means OFF."""
        if isinstance(value, cls):
            return value
        if isinstance(value, int) and not isinstance(value, bool):
            try:
                return cls(value)
            except ValueError:
                pass
        _LOGGER.debug("Unknown TTY mode %r, using OFF", value)
        return cls.OFF


class CastSessionState(Enum):
    """State of one screen-mirroring session."""

    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTED = "disconnected"

    @classmethod
    def from_raw(cls, value: Any) -> CastSessionState:
        """Parse a session state; anything unrecognized is DISCONNECTED."""
        if isinstance(value, cls):
            return value
        if isinstance(value, str):
            try:
                return cls(value.lower())
            except ValueError:
                pass
        return cls.DISCONNECTED


class HeadsetPlugState(Enum):
    """Accessory plug state as reported by the audio stack."""

    UNPLUGGED = 0
    PLUGGED = 1

    @classmethod
    def from_raw(cls, value: Any) -> HeadsetPlugState | None:
        """Parse a plug state; values other than 0 and 1 are ignored (None)."""
        if isinstance(value, cls):
            return value
        if isinstance(value, bool) or not isinstance(value, int):
            return None
        try:
            return cls(value)
        except ValueError:
            return None


def bluetooth_enabled(adapter_state: Any) -> bool:
    """Return True when the raw adapter state means the radio is on.

    Accepts the platform integer (12 == STATE_ON) or a state name.
    """
    if isinstance(adapter_state, str):
        return adapter_state.lower() in ("on", "state_on")
    if isinstance(adapter_state, bool):
        return False
    return adapter_state == 12


def bluetooth_connected(connection_state: Any) -> bool:
    """Return True when the raw connection state means a device is connected.

    Accepts the platform integer (2 == STATE_CONNECTED) or a state name.
    """
    if isinstance(connection_state, str):
        return connection_state.lower() in ("connected", "state_connected")
    if isinstance(connection_state, bool):
        return False
    return connection_state == 2


@dataclass(frozen=True)
class CastSession:
    """A screen-mirroring session as reported by the cast stack."""

    session_id: str
    state: CastSessionState
    name: str | None = None

    @property
    def is_active(self) -> bool:
        """Connecting or connected sessions count as casting."""
        return self.state in (CastSessionState.CONNECTING, CastSessionState.CONNECTED)


@dataclass(frozen=True)
class StorageVolume:
    """A storage volume as reported by the storage stack.

    Attributes:
        path: Mount path.
        removable: Whether the volume is removable media.
        allow_mass_storage: Whether the volume supports mass-storage export.
        description: User-facing volume label.
        state: Mount state string (e.g. "mounted", "removed").
    """

    path: str
    removable: bool
    allow_mass_storage: bool
    description: str
    state: str = "mounted"


def is_external_card_present(volumes: list[StorageVolume], keyword: str) -> bool:
    """Return True if a removable, mass-storage, keyword-labeled card is in.

    The first matching volume decides; a "removed" state means absent.
    """
    for volume in volumes:
        if (
            volume.removable
            and volume.allow_mass_storage
            and keyword in volume.description
        ):
            return volume.state != "removed"
    return False


# --------------------------------------------------------------------------
# Events
# --------------------------------------------------------------------------


@dataclass(frozen=True)
class TtyModeChanged:
    kind: ClassVar[SignalKind] = SignalKind.TTY_MODE

    mode: TtyMode


@dataclass(frozen=True)
class BluetoothChanged:
    """Adapter or connection state changed (re-queried snapshot)."""

    kind: ClassVar[SignalKind] = SignalKind.BLUETOOTH

    adapter_present: bool
    enabled: bool
    connected: bool


@dataclass(frozen=True)
class AlarmChanged:
    """Next alarm, current user or alarm-icon setting changed."""

    kind: ClassVar[SignalKind] = SignalKind.ALARM

    alarm_scheduled: bool
    icon_enabled: bool


@dataclass(frozen=True)
class SyncStateChanged:
    kind: ClassVar[SignalKind] = SignalKind.SYNC_STATE

    active: bool


@dataclass(frozen=True)
class InterruptionModeChanged:
    """Interruption mode was set; carries a fresh ringer reading."""

    kind: ClassVar[SignalKind] = SignalKind.INTERRUPTION_MODE

    mode: InterruptionMode
    ringer_mode: RingerMode


@dataclass(frozen=True)
class RingerModeChanged:
    kind: ClassVar[SignalKind] = SignalKind.RINGER_MODE

    ringer_mode: RingerMode


@dataclass(frozen=True)
class SimStateChanged:
    """A radio slot changed state.

    ``slot`` is the slot index resolved from the subscription identifier;
    it is not validated here.
    """

    kind: ClassVar[SignalKind] = SignalKind.SIM_STATE

    slot: int
    state: SimCardState


@dataclass(frozen=True)
class StorageChanged:
    kind: ClassVar[SignalKind] = SignalKind.STORAGE

    card_present: bool


@dataclass(frozen=True)
class CastSessionsChanged:
    """Full, re-queried list of mirroring sessions."""

    kind: ClassVar[SignalKind] = SignalKind.CAST_SESSIONS

    sessions: tuple[CastSession, ...] = ()

    @property
    def is_casting(self) -> bool:
        return any(session.is_active for session in self.sessions)


@dataclass(frozen=True)
class CastHideDue:
    """The debounced cast hide timer fired."""

    kind: ClassVar[SignalKind] = SignalKind.CAST_HIDE_DUE


@dataclass(frozen=True)
class ElevatedAccessSnapshot:
    """Elevated-access sessions and widget eligibility, read together.

    Attributes:
        packages: Packages currently holding elevated sessions.
        eligible: Whether the widget is enabled for the current user.
        user_id: The current user.
    """

    kind: ClassVar[SignalKind] = SignalKind.ELEVATED_SESSIONS

    packages: tuple[str, ...]
    eligible: bool
    user_id: int

    @property
    def has_sessions(self) -> bool:
        return bool(self.packages)


@dataclass(frozen=True)
class ElevatedSessionsChanged(ElevatedAccessSnapshot):
    kind: ClassVar[SignalKind] = SignalKind.ELEVATED_SESSIONS


@dataclass(frozen=True)
class WidgetEligibilityChanged(ElevatedAccessSnapshot):
    kind: ClassVar[SignalKind] = SignalKind.WIDGET_ELIGIBILITY


@dataclass(frozen=True)
class HotspotChanged:
    kind: ClassVar[SignalKind] = SignalKind.HOTSPOT

    enabled: bool


@dataclass(frozen=True)
class HeadsetPlugChanged:
    """Accessory plug change; ``state`` is None for unrecognized values."""

    kind: ClassVar[SignalKind] = SignalKind.HEADSET

    state: HeadsetPlugState | None
    has_microphone: bool


SignalEvent = (
    TtyModeChanged
    | BluetoothChanged
    | AlarmChanged
    | SyncStateChanged
    | InterruptionModeChanged
    | RingerModeChanged
    | SimStateChanged
    | StorageChanged
    | CastSessionsChanged
    | CastHideDue
    | ElevatedSessionsChanged
    | WidgetEligibilityChanged
    | HotspotChanged
    | HeadsetPlugChanged
)
