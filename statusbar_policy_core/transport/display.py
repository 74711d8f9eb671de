"""Display facade that forwards commands to a remote renderer.

Commands arrive synchronously from the policy and are queued; a background
task sends them in order. A command is accepted once it is queued, so the
indicator store stays in step with what was handed to the transport.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
from typing import Any

from ..display import DisplayFacade
from ..errors import DisplayConnectionError, DisplayError
from ..widget import WidgetContent
from .protocol import (
    build_indicator_frame,
    build_widget_publish_frame,
    build_widget_unpublish_frame,
)
from .ws_client import DisplayWsClient

_LOGGER = logging.getLogger(__name__)

MAX_PENDING_FRAMES = 256


class WsDisplayFacade(DisplayFacade):
    """Display facade backed by a websocket connection.

    Usage:
        display = WsDisplayFacade("panel-1", "192.168.1.20", 8765)
        await display.connect()
        policy = StatusBarPolicy(display, sources)
        policy.start()
        ...
        await display.close()
    """

    def __init__(
        self,
        display_id: str,
        host: str,
        port: int,
        *,
        path: str = "/ws",
        client: DisplayWsClient | None = None,
        max_pending: int = MAX_PENDING_FRAMES,
    ) -> None:
        self.display_id = display_id
        self.host = host
        self.port = port
        self._path = path
        self._client = client or DisplayWsClient()
        self._queue: asyncio.Queue[dict[str, Any]] = asyncio.Queue(maxsize=max_pending)
        self._sender_task: asyncio.Task[None] | None = None

    # -------------------------------------------------------------------------
    # Public API: Connection Management
    # -------------------------------------------------------------------------

    async def connect(self) -> None:
        """Connect to the renderer and start the sender task.

        Raises:
            DisplayError: If the connection cannot be established.
        """
        _LOGGER.info(
            "[%s] Connecting to ws://%s:%s%s",
            self.display_id,
            self.host,
            self.port,
            self._path,
        )
        await self._client.connect(self.host, self.port, path=self._path)
        if self._sender_task is None:
            self._sender_task = asyncio.create_task(self._send_loop())

    async def close(self) -> None:
        """Stop sending and close the connection."""
        _LOGGER.info("[%s] Closing display connection", self.display_id)
        if self._sender_task is not None:
            self._sender_task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await self._sender_task
            self._sender_task = None
        await self._client.close()

    @property
    def pending(self) -> int:
        """Number of frames waiting to be sent."""
        return self._queue.qsize()

    # -------------------------------------------------------------------------
    # DisplayFacade
    # -------------------------------------------------------------------------

    def set_indicator(
        self,
        name: str,
        visible: bool,
        icon: str | None,
        description: str | None,
    ) -> None:
        self._enqueue(
            build_indicator_frame(
                display_id=self.display_id,
                name=name,
                visible=visible,
                icon=icon,
                description=description,
            )
        )

    def publish_widget(self, widget_id: str, content: WidgetContent) -> None:
        self._enqueue(
            build_widget_publish_frame(
                display_id=self.display_id, widget_id=widget_id, content=content
            )
        )

    def unpublish_widget(self, widget_id: str) -> None:
        self._enqueue(
            build_widget_unpublish_frame(
                display_id=self.display_id, widget_id=widget_id
            )
        )

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _enqueue(self, frame: dict[str, Any]) -> None:
        if not self._client.is_connected:
            raise DisplayConnectionError(f"Display {self.display_id} is not connected")
        try:
            self._queue.put_nowait(frame)
        except asyncio.QueueFull as err:
            raise DisplayError(
                f"Display {self.display_id} has {self._queue.qsize()} pending frames"
            ) from err

    async def _send_loop(self) -> None:
        """Send queued frames in order; failed frames are logged and dropped."""
        while True:
            frame = await self._queue.get()
            try:
                await self._client.send_json(frame)
                _LOGGER.debug("[%s] Sent %s", self.display_id, frame["type"])
            except DisplayError as err:
                _LOGGER.warning(
                    "[%s] Failed to send %s: %s", self.display_id, frame["type"], err
                )
            finally:
                self._queue.task_done()
