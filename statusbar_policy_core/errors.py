"""Error types for the status bar policy core."""

from __future__ import annotations


class StatusBarPolicyError(Exception):
    """Base error for status bar policy failures."""


class ConfigLoadError(StatusBarPolicyError):
    """Error loading or validating the policy configuration."""


class DisplayError(StatusBarPolicyError):
    """The display facade rejected or failed a command."""


class DisplayTimeout(DisplayError):
    """Timeout while communicating with a remote display."""


class DisplayConnectionError(DisplayError):
    """Connection to a remote display failed."""


class DisplayHandshakeError(DisplayError):
    """WebSocket handshake with a remote display failed."""


class PackageNotFoundError(StatusBarPolicyError, LookupError):
    """A package reference could not be resolved to an installed app."""

    def __init__(self, package: str) -> None:
        super().__init__(f"Package not found: {package}")
        self.package = package
