"""Display facade boundary.

The policy issues three kinds of outbound commands: indicator updates,
widget publishes and widget unpublishes. Implementations can forward them
to:
- the local status bar service
- a remote renderer (see ``transport.WsDisplayFacade``)
- an in-memory buffer (tests, dev tools)
- nowhere (headless)
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .widget import WidgetContent


@dataclass(frozen=True)
class IndicatorCommand:
    """Set the full displayed state of one indicator."""

    name: str
    visible: bool
    icon: str | None
    description: str | None


@dataclass(frozen=True)
class WidgetPublishCommand:
    widget_id: str
    content: WidgetContent


@dataclass(frozen=True)
class WidgetUnpublishCommand:
    widget_id: str


DisplayCommand = IndicatorCommand | WidgetPublishCommand | WidgetUnpublishCommand


class DisplayFacade(ABC):
    """Abstract interface for the status display.

    Calls are synchronous. Implementations raise ``DisplayError`` when a
    command cannot be applied.
    """

    @abstractmethod
    def set_indicator(
        self,
        name: str,
        visible: bool,
        icon: str | None,
        description: str | None,
    ) -> None:
        """Apply the complete state of one indicator."""

    @abstractmethod
    def publish_widget(self, widget_id: str, content: WidgetContent) -> None:
        """Publish (or replace) a widget."""

    @abstractmethod
    def unpublish_widget(self, widget_id: str) -> None:
        """Remove a widget; a no-op if it is not published."""


class NullDisplay(DisplayFacade):
    """Discards every command."""

    def set_indicator(
        self,
        name: str,
        visible: bool,
        icon: str | None,
        description: str | None,
    ) -> None:
        """Discard."""

    def publish_widget(self, widget_id: str, content: WidgetContent) -> None:
        """Discard."""

    def unpublish_widget(self, widget_id: str) -> None:
        """Discard."""


class BufferDisplay(DisplayFacade):
    """In-memory command log for testing and dev tools.

    Stores commands in a bounded buffer (FIFO eviction).
    """

    def __init__(self, max_size: int = 1000) -> None:
        self._buffer: list[DisplayCommand] = []
        self._max_size = max_size

    def _append(self, command: DisplayCommand) -> None:
        if len(self._buffer) >= self._max_size:
            self._buffer.pop(0)
        self._buffer.append(command)

    def set_indicator(
        self,
        name: str,
        visible: bool,
        icon: str | None,
        description: str | None,
    ) -> None:
        self._append(IndicatorCommand(name, visible, icon, description))

    def publish_widget(self, widget_id: str, content: WidgetContent) -> None:
        self._append(WidgetPublishCommand(widget_id, content))

    def unpublish_widget(self, widget_id: str) -> None:
        self._append(WidgetUnpublishCommand(widget_id))

    @property
    def commands(self) -> list[DisplayCommand]:
        """Get all buffered commands."""
        return list(self._buffer)

    def indicator_commands(self, name: str | None = None) -> list[IndicatorCommand]:
        """Get buffered indicator commands, optionally for one indicator."""
        return [
            c
            for c in self._buffer
            if isinstance(c, IndicatorCommand) and (name is None or c.name == name)
        ]

    def widget_commands(
        self,
    ) -> list[WidgetPublishCommand | WidgetUnpublishCommand]:
        """Get buffered widget publish/unpublish commands."""
        return [
            c
            for c in self._buffer
            if isinstance(c, (WidgetPublishCommand, WidgetUnpublishCommand))
        ]

    def clear(self) -> None:
        """Clear the buffer."""
        self._buffer.clear()

    def last(self, n: int = 1) -> list[DisplayCommand]:
        """Get the last N commands."""
        return self._buffer[-n:]


class CallbackDisplay(DisplayFacade):
    """Forwards every command object to a callback."""

    def __init__(self, callback: Callable[[DisplayCommand], None]) -> None:
        self._callback = callback

    def set_indicator(
        self,
        name: str,
        visible: bool,
        icon: str | None,
        description: str | None,
    ) -> None:
        self._callback(IndicatorCommand(name, visible, icon, description))

    def publish_widget(self, widget_id: str, content: WidgetContent) -> None:
        self._callback(WidgetPublishCommand(widget_id, content))

    def unpublish_widget(self, widget_id: str) -> None:
        self._callback(WidgetUnpublishCommand(widget_id))
