"""Remote display transport.

This package contains all IO and wire protocol handling for forwarding
display commands over a websocket.

Components:
- ws_client: websocket connection and JSON send
- protocol: Envelope and frame builders
- display: DisplayFacade implementation
"""

from .display import WsDisplayFacade
from .protocol import (
    PROTOCOL_VERSION,
    build_envelope,
    build_indicator_frame,
    build_widget_publish_frame,
    build_widget_unpublish_frame,
)
from .ws_client import DisplayWsClient, display_url

__all__ = [
    "PROTOCOL_VERSION",
    "DisplayWsClient",
    "WsDisplayFacade",
    "build_envelope",
    "build_indicator_frame",
    "build_widget_publish_frame",
    "build_widget_unpublish_frame",
    "display_url",
]
