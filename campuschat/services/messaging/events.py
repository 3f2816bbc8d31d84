# campuschat/services/messaging/events.py
"""
Realtime chat event names and envelope builders.

Every frame on the chat socket, in either direction, is a JSON object:
{
    "event": str,  # Event name
    "data": any    # Event-specific data
}
"""

from enum import Enum
from typing import Any, Dict, Optional, Tuple


class ClientEvent(str, Enum):
    """Events a connected client may send."""

    JOIN_ROOM = "join_room"
    LEAVE_ROOM = "leave_room"
    SEND_MESSAGE = "send_message"


class ServerEvent(str, Enum):
    """Events the server emits."""

    JOINED_ROOM = "joined_room"
    LEFT_ROOM = "left_room"
    RECEIVE_MESSAGE = "receive_message"
    ERROR = "error"


def build_event(event: ServerEvent, data: Any) -> Dict[str, Any]:
    """Build a frame ready for ``send_json``."""
    return {"event": event.value, "data": data}


def build_error_event(detail: str) -> Dict[str, Any]:
    return build_event(ServerEvent.ERROR, {"detail": detail})


def parse_client_event(frame: Any) -> Tuple[Optional[ClientEvent], Any]:
    """
    Split an incoming frame into its event and data.

    Returns ``(None, None)`` when the frame is not an envelope or names an
    unknown event.
    """
    if not isinstance(frame, dict):
        return None, None
    try:
        event = ClientEvent(frame.get("event"))
    except ValueError:
        return None, None
    return event, frame.get("data")
