"""Single-slot delayed action.

The timer runs its callback on the owning event loop, the same loop that
dispatches signal events, so a ``disarm()`` issued while processing an event
always wins over a callback that has not run yet.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

_LOGGER = logging.getLogger(__name__)


class DebounceTimer:
    """At most one pending action; re-arming replaces it.

    Usage:
        timer = DebounceTimer("cast")
        timer.arm(hide_icon, 3.0)
        timer.disarm()
    """

    def __init__(
        self,
        name: str,
        *,
        loop: asyncio.AbstractEventLoop | None = None,
    ) -> None:
        """Initialize timer.

        Args:
            name: Label used in log messages.
            loop: Event loop to schedule on. Defaults to the running loop at
                the time ``arm`` is called.
        """
        self.name = name
        self._loop = loop
        self._handle: asyncio.TimerHandle | None = None

    @property
    def pending(self) -> bool:
        """Whether an action is armed and has not run or been cancelled."""
        return self._handle is not None

    def arm(self, action: Callable[[], None], delay: float) -> None:
        """Schedule ``action`` after ``delay`` seconds, replacing any pending one."""
        self.disarm()
        loop = self._loop or asyncio.get_running_loop()
        self._handle = loop.call_later(delay, self._fire, action)
        _LOGGER.debug("[%s] Armed (%.2fs)", self.name, delay)

    def disarm(self) -> None:
        """Cancel the pending action; no effect if nothing is pending."""
        if self._handle is None:
            return
        self._handle.cancel()
        self._handle = None
        _LOGGER.debug("[%s] Disarmed", self.name)

    def _fire(self, action: Callable[[], None]) -> None:
        self._handle = None
        _LOGGER.debug("[%s] Fired", self.name)
        action()
