"""Wire frames for forwarding display commands to a remote renderer.

Every frame is a versioned JSON envelope. Frame types:
- ``indicator``: full state of one indicator
- ``widget_publish``: full widget content
- ``widget_unpublish``: widget removal
"""

from __future__ import annotations

import time
import uuid
from typing import Any

from ..widget import WidgetContent

PROTOCOL_VERSION = 1


def build_envelope(
    *,
    display_id: str,
    msg_type: str,
    body: dict[str, Any],
    msg_id: str | None = None,
    timestamp_ms: int | None = None,
) -> dict[str, Any]:
    """Build a canonical envelope for display messages.

    Args:
        display_id: Identifier of the target display.
        msg_type: Frame type (e.g., "indicator").
        body: JSON-serializable body.
        msg_id: Optional caller-supplied identifier. Generated when omitted.
        timestamp_ms: Optional epoch milliseconds override.
    """
    return {
        "v": PROTOCOL_VERSION,
        "type": msg_type,
        "msg_id": msg_id or str(uuid.uuid4()),
        "display_id": display_id,
        "ts": timestamp_ms if timestamp_ms is not None else int(time.time() * 1000),
        "body": body,
    }


def build_indicator_frame(
    *,
    display_id: str,
    name: str,
    visible: bool,
    icon: str | None,
    description: str | None,
) -> dict[str, Any]:
    """Construct an indicator frame carrying the full indicator state."""
    if not name:
        raise ValueError("name is required for indicator frames")
    return build_envelope(
        display_id=display_id,
        msg_type="indicator",
        body={
            "name": name,
            "visible": visible,
            "icon": icon,
            "description": description,
        },
    )


def build_widget_publish_frame(
    *, display_id: str, widget_id: str, content: WidgetContent
) -> dict[str, Any]:
    return build_envelope(
        display_id=display_id,
        msg_type="widget_publish",
        body={"widget_id": widget_id, "content": content.to_dict()},
    )


def build_widget_unpublish_frame(*, display_id: str, widget_id: str) -> dict[str, Any]:
    return build_envelope(
        display_id=display_id,
        msg_type="widget_unpublish",
        body={"widget_id": widget_id},
    )
