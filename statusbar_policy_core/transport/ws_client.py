"""WebSocket client for a remote status display."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import (
    ConnectionClosed,
    InvalidHandshake,
    InvalidURI,
    WebSocketException,
)

from ..errors import DisplayConnectionError, DisplayHandshakeError, DisplayTimeout

_LOGGER = logging.getLogger(__name__)

DEFAULT_DISPLAY_PATH = "/ws"


def display_url(host: str, port: int, path: str = DEFAULT_DISPLAY_PATH) -> str:
    """Build the websocket URL of a display endpoint.

    IPv6 literals are bracketed and a missing leading slash is added to the
    path, so ``display_url("fe80::1", 8765, "statusbar")`` is
    ``ws://[fe80::1]:8765/statusbar``.

    Raises:
        ValueError: If the host is empty.
    """
    host = host.strip()
    if not host:
        raise ValueError("host is required for a display endpoint")
    if ":" in host and not host.startswith("["):
        host = f"[{host}]"
    if not path.startswith("/"):
        path = f"/{path}"
    return f"ws://{host}:{port}{path}"


class DisplayWsClient:
    """Sends JSON frames to a remote status display over one websocket."""

    def __init__(self) -> None:
        self._ws: ClientConnection | None = None

    @property
    def is_connected(self) -> bool:
        return self._ws is not None

    async def connect(
        self,
        host: str,
        port: int,
        *,
        path: str = DEFAULT_DISPLAY_PATH,
        ping_interval: int | None = 20,
        timeout: float = 15.0,
    ) -> None:
        """Connect to the display websocket.

        Args:
            host: Display host name or address.
            port: Display port.
            path: Endpoint path on the display.
            ping_interval: Seconds between keepalive pings (None disables).
            timeout: Seconds to wait for the opening handshake.

        Raises:
            DisplayTimeout: If the handshake does not finish in time.
            DisplayHandshakeError: If the display rejects the upgrade.
            DisplayConnectionError: If the display cannot be reached.
        """
        url = display_url(host, port, path)
        try:
            self._ws = await asyncio.wait_for(
                connect(url, ping_interval=ping_interval, close_timeout=5),
                timeout=timeout,
            )
        except TimeoutError as err:
            raise DisplayTimeout(f"Timed out connecting to {url}") from err
        except (InvalidHandshake, InvalidURI) as err:
            raise DisplayHandshakeError(f"Display at {url} refused: {err}") from err
        except (OSError, WebSocketException) as err:
            raise DisplayConnectionError(f"Cannot reach display at {url}") from err
        _LOGGER.debug("Connected to %s", url)

    async def close(self) -> None:
        """Close the websocket connection."""
        if self._ws is not None:
            await self._ws.close()
            self._ws = None

    async def send_json(self, payload: dict[str, Any]) -> None:
        """Send a JSON payload to the websocket.

        Raises:
            DisplayConnectionError: If not connected or the peer went away.
        """
        if self._ws is None:
            raise DisplayConnectionError("WebSocket is not connected")
        try:
            await self._ws.send(json.dumps(payload))
        except ConnectionClosed as err:
            self._ws = None
            raise DisplayConnectionError("WebSocket closed by display") from err
