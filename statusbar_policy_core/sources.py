"""Inbound collaborator boundary.

These protocols describe the platform subsystems the policy re-queries when
a signal fires. Implementations are thin wrappers over the radio, audio,
storage, cast and permission stacks; the policy only ever sees canonical
values (see ``signals``).

Each method is a synchronous read of current state.
"""

from __future__ import annotations

from typing import Any, Protocol

from .signals import CastSession, StorageVolume


class BluetoothSource(Protocol):
    """Short-range radio stack."""

    def has_adapter(self) -> bool:
        """Return False when the device has no adapter at all."""
        ...

    def get_adapter_state(self) -> Any:
        """Return the raw adapter state (e.g. 12 or "on")."""
        ...

    def get_connection_state(self) -> Any:
        """Return the raw connection state (e.g. 2 or "connected")."""
        ...


class AudioSource(Protocol):
    """Audio stack."""

    def get_ringer_mode(self) -> Any:
        """Return the raw ringer mode (0 silent, 1 vibrate, 2 normal)."""
        ...


class AlarmSource(Protocol):
    """Alarm scheduler."""

    def get_next_alarm(self, user_id: int) -> Any | None:
        """Return the next scheduled alarm for a user, or None."""
        ...


class SettingsSource(Protocol):
    """Per-user settings store."""

    def show_alarm_icon(self) -> bool | None:
        """Return the alarm-icon setting, or None when unset."""
        ...


class UserContext(Protocol):
    """Multi-user state."""

    def current_user_id(self) -> int:
        """Return the foreground user."""
        ...


class SubscriptionResolver(Protocol):
    """Maps radio subscription identifiers to physical slot indices."""

    def slot_for_subscription(self, subscription_id: int) -> int:
        """Return the slot index, or a negative number when unknown."""
        ...


class StorageSource(Protocol):
    """Storage stack."""

    def get_volumes(self) -> list[StorageVolume]:
        """Return all known storage volumes."""
        ...


class CastSource(Protocol):
    """Screen-mirroring stack."""

    def get_cast_sessions(self) -> list[CastSession]:
        """Return every known mirroring session."""
        ...


class HotspotSource(Protocol):
    """Tethering stack."""

    def is_hotspot_enabled(self) -> bool:
        ...


class ElevatedAccessSource(Protocol):
    """Tracks processes currently holding elevated privileges."""

    def get_packages_with_active_sessions(self) -> list[str]:
        """Return originating package ids of active sessions."""
        ...


class WidgetEligibilitySource(Protocol):
    """Per-user, per-feature widget enablement."""

    def is_widget_enabled_for_user(self, user_id: int) -> bool:
        ...


class PackageLabelResolver(Protocol):
    """Resolves package ids to user-facing application labels."""

    def get_application_label(self, package: str) -> str | None:
        """Return the label.

        Raises:
            PackageNotFoundError: If the package is not installed.
        """
        ...


class IdentityProvider(Protocol):
    """Caller identity control for privileged calls.

    ``clear_calling_identity`` switches to the ambient (system) identity and
    returns a token; ``restore_calling_identity`` switches back.
    """

    def clear_calling_identity(self) -> Any:
        ...

    def restore_calling_identity(self, token: Any) -> None:
        ...


class NullIdentityProvider:
    """Identity provider for processes that already run as the system."""

    def clear_calling_identity(self) -> Any:
        return None

    def restore_calling_identity(self, token: Any) -> None:
        """Nothing to restore."""
