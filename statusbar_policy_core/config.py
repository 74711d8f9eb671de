"""Policy configuration loading.

Configuration is data, not code. A deployment may ship a YAML file that
overrides the debounce delay, the build-time feature flags, and the icon and
description resources used for each indicator. Every key is optional; an
absent file section falls back to the built-in defaults below.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from .errors import ConfigLoadError

# Debounce delay for hiding the cast indicator (seconds).
DEFAULT_CAST_HIDE_DELAY = 3.0

DEFAULT_SD_CARD_KEYWORD = "SD"

# The owner user; only this user may see the elevated-access widget.
DEFAULT_PRIMARY_USER_ID = 0

DEFAULT_WIDGET_ID = "elevated-access"

DEFAULT_ICONS: dict[str, str] = {
    "tty": "stat_sys_tty_mode",
    "cdma_eri": "stat_sys_roaming_cdma_0",
    "bluetooth": "stat_sys_data_bluetooth",
    "bluetooth_connected": "stat_sys_data_bluetooth_connected",
    "alarm_clock": "stat_sys_alarm",
    "sync_active": "stat_sys_sync",
    "zen_important": "stat_sys_zen_important",
    "zen_none": "stat_sys_zen_none",
    "volume_vibrate": "stat_sys_ringer_vibrate",
    "sd_card_absent": "stat_sys_no_sdcard",
    "sim_error": "stat_sys_no_sim",
    "cast": "stat_sys_cast",
    "elevated_access": "stat_sys_su",
    "hotspot": "stat_sys_hotspot",
    "headset_mic": "stat_sys_headset_with_mic",
    "headset_no_mic": "stat_sys_headset_without_mic",
    "widget": "ic_qs_su",
}

DEFAULT_DESCRIPTIONS: dict[str, str] = {
    "bluetooth_connected": "Bluetooth connected.",
    "bluetooth_disconnected": "Bluetooth disconnected.",
    "tty_enabled": "TeleTypewriter enabled.",
    "zen_none": "Total silence",
    "zen_important": "Priority only",
    "volume_vibrate": "Ringer vibrate.",
    "casting": "Casting screen.",
    "sim_error": "SIM card error",
    "widget_label": "Root access",
}


@dataclass(frozen=True)
class IndicatorResources:
    """Icon references and accessibility descriptions by resource key.

    Icon references are opaque to the policy; the display facade resolves
    them.
    """

    icons: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_ICONS))
    descriptions: dict[str, str] = field(
        default_factory=lambda: dict(DEFAULT_DESCRIPTIONS)
    )

    def icon(self, key: str) -> str:
        """Return the icon reference for a resource key."""
        return self.icons[key]

    def description(self, key: str) -> str:
        """Return the description text for a resource key."""
        return self.descriptions[key]


@dataclass(frozen=True)
class PolicyConfig:
    """Static configuration of the status bar policy.

    Attributes:
        cast_hide_delay: Seconds the cast indicator lingers after casting stops.
        show_sync_icon: Build-time flag for the sync-active indicator.
        show_sd_card_absent_indicator: Build-time flag for sd-card-absent.
        show_sim_error_indicator: Build-time flag for per-slot card errors.
        sd_card_keyword: Keyword identifying the external card volume.
        slot_count: Number of physical radio slots.
        primary_user_id: Identifier of the primary (owner) user.
        widget_id: Identifier used to publish the elevated-access widget.
        resources: Icon and description tables.
    """

    cast_hide_delay: float = DEFAULT_CAST_HIDE_DELAY
    show_sync_icon: bool = False
    show_sd_card_absent_indicator: bool = False
    show_sim_error_indicator: bool = False
    sd_card_keyword: str = DEFAULT_SD_CARD_KEYWORD
    slot_count: int = 1
    primary_user_id: int = DEFAULT_PRIMARY_USER_ID
    widget_id: str = DEFAULT_WIDGET_ID
    resources: IndicatorResources = field(default_factory=IndicatorResources)


def _load_yaml(path: Path) -> dict[str, Any]:
    """Load YAML file with error handling."""
    if not path.exists():
        raise ConfigLoadError(f"File not found: {path}")
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as err:
        raise ConfigLoadError(f"Invalid YAML in {path}: {err}") from err
    if not isinstance(data, dict):
        raise ConfigLoadError(f"Top level of {path} must be a mapping")
    return data


def _merge_table(
    defaults: dict[str, str], overrides: Any, section: str
) -> dict[str, str]:
    """Overlay a YAML mapping onto a default resource table."""
    if overrides is None:
        return dict(defaults)
    if not isinstance(overrides, dict):
        raise ConfigLoadError(f"'{section}' must be a mapping")
    merged = dict(defaults)
    merged.update({str(k): str(v) for k, v in overrides.items()})
    return merged


def parse_config(data: dict[str, Any]) -> PolicyConfig:
    """Build a PolicyConfig from already-parsed YAML data.

    Raises:
        ConfigLoadError: If a value is out of range or has the wrong shape.
    """
    try:
        delay = float(data.get("cast_hide_delay", DEFAULT_CAST_HIDE_DELAY))
        slot_count = int(data.get("slot_count", 1))
        primary_user_id = int(data.get("primary_user_id", DEFAULT_PRIMARY_USER_ID))
    except (TypeError, ValueError) as err:
        raise ConfigLoadError(f"Invalid numeric setting: {err}") from err

    if delay < 0:
        raise ConfigLoadError(f"cast_hide_delay must be >= 0, got {delay}")
    if slot_count < 1:
        raise ConfigLoadError(f"slot_count must be >= 1, got {slot_count}")

    resources = IndicatorResources(
        icons=_merge_table(DEFAULT_ICONS, data.get("icons"), "icons"),
        descriptions=_merge_table(
            DEFAULT_DESCRIPTIONS, data.get("descriptions"), "descriptions"
        ),
    )

    return PolicyConfig(
        cast_hide_delay=delay,
        show_sync_icon=bool(data.get("show_sync_icon", False)),
        show_sd_card_absent_indicator=bool(
            data.get("show_sd_card_absent_indicator", False)
        ),
        show_sim_error_indicator=bool(data.get("show_sim_error_indicator", False)),
        sd_card_keyword=str(data.get("sd_card_keyword", DEFAULT_SD_CARD_KEYWORD)),
        slot_count=slot_count,
        primary_user_id=primary_user_id,
        widget_id=str(data.get("widget_id", DEFAULT_WIDGET_ID)),
        resources=resources,
    )


def load_config(path: Path | None = None) -> PolicyConfig:
    """Load policy configuration.

    Args:
        path: Path to a YAML config file. When None, defaults are returned.

    Returns:
        Parsed PolicyConfig.

    Raises:
        ConfigLoadError: If the file is missing or invalid.
    """
    if path is None:
        return PolicyConfig()
    return parse_config(_load_yaml(path))
