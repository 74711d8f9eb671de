"""Elevated-access list widget.

The widget exists only while three things hold together: at least one
process holds an elevated session, the widget is enabled for the current
user, and that user is the primary user. Whenever it should exist it is
rebuilt from scratch from the current session list; when it stops existing
a single unpublish is issued.

Publish and unpublish run under the ambient (system) identity so the
caller's identity never gates them.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from .config import IndicatorResources
from .display import DisplayFacade
from .errors import PackageNotFoundError
from .sources import IdentityProvider, PackageLabelResolver

_LOGGER = logging.getLogger(__name__)

# Intent action opened by the widget's settings affordance.
SETTINGS_ACTION_TARGET = "application_development_settings"


def widget_should_exist(
    has_sessions: bool, eligible: bool, is_primary_user: bool
) -> bool:
    """Widget existence rule."""
    return has_sessions and eligible and is_primary_user


@dataclass(frozen=True)
class WidgetDecision:
    """Whether the widget should exist, and what it should list."""

    should_exist: bool
    packages: tuple[str, ...] = ()
    user_id: int = 0


@dataclass(frozen=True)
class WidgetAction:
    """An activation target.

    Attributes:
        kind: "launch" (open a package's main entry) or "settings".
        target: Package id or settings screen.
    """

    kind: str
    target: str


@dataclass(frozen=True)
class WidgetListItem:
    title: str
    summary: str
    icon: str
    on_click: WidgetAction


@dataclass(frozen=True)
class WidgetContent:
    """Complete widget payload; always rebuilt, never patched."""

    label: str
    content_description: str
    icon: str
    settings_action: WidgetAction
    items: tuple[WidgetListItem, ...]
    user_id: int
    sensitive: bool = True

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for wire format."""
        return {
            "label": self.label,
            "content_description": self.content_description,
            "icon": self.icon,
            "settings_action": {
                "kind": self.settings_action.kind,
                "target": self.settings_action.target,
            },
            "items": [
                {
                    "title": item.title,
                    "summary": item.summary,
                    "icon": item.icon,
                    "on_click": {
                        "kind": item.on_click.kind,
                        "target": item.on_click.target,
                    },
                }
                for item in self.items
            ],
            "user_id": self.user_id,
            "sensitive": self.sensitive,
        }


@contextmanager
def privileged_identity(provider: IdentityProvider) -> Iterator[None]:
    """Run the enclosed block under the ambient identity.

    The caller identity is restored on every exit path.
    """
    token = provider.clear_calling_identity()
    try:
        yield
    finally:
        provider.restore_calling_identity(token)


def resolve_label(resolver: PackageLabelResolver, package: str) -> str:
    """Return the app label for a package, falling back to the package id."""
    try:
        label = resolver.get_application_label(package)
    except PackageNotFoundError:
        _LOGGER.debug("No installed package %s, using raw id", package)
        return package
    return label or package


class WidgetPublisher:
    """Publishes and unpublishes the elevated-access widget."""

    def __init__(
        self,
        widget_id: str,
        display: DisplayFacade,
        labels: PackageLabelResolver,
        identity: IdentityProvider,
        resources: IndicatorResources,
    ) -> None:
        self.widget_id = widget_id
        self._display = display
        self._labels = labels
        self._identity = identity
        self._resources = resources
        # None until the first decision: the first "should not exist"
        # still unpublishes to clear anything left by a previous process.
        self._published: bool | None = None

    @property
    def published(self) -> bool:
        return bool(self._published)

    def build(self, packages: tuple[str, ...], user_id: int) -> WidgetContent:
        """Build the full widget content from the active session list."""
        icon = self._resources.icon("widget")
        label = self._resources.description("widget_label")
        items = tuple(
            WidgetListItem(
                title=resolve_label(self._labels, package),
                summary=package,
                icon=icon,
                on_click=WidgetAction("launch", package),
            )
            for package in packages
        )
        return WidgetContent(
            label=label,
            content_description=label,
            icon=icon,
            settings_action=WidgetAction("settings", SETTINGS_ACTION_TARGET),
            items=items,
            user_id=user_id,
        )

    def apply(self, decision: WidgetDecision) -> None:
        """Publish or unpublish according to a decision.

        Raises:
            DisplayError: If the display rejects the command.
        """
        if decision.should_exist:
            content = self.build(decision.packages, decision.user_id)
            with privileged_identity(self._identity):
                self._display.publish_widget(self.widget_id, content)
            self._published = True
            _LOGGER.info(
                "[%s] Published (%d sessions)", self.widget_id, len(content.items)
            )
            return

        if self._published is False:
            return

        with privileged_identity(self._identity):
            self._display.unpublish_widget(self.widget_id)
        self._published = False
        _LOGGER.info("[%s] Unpublished", self.widget_id)
