# campuschat/services/messaging/__init__.py
"""
Realtime layer for chat.

- rooms: room naming and the connection registry
- room_broadcaster: local and relayed fan-out to room members
- events: socket frame names and builders
"""

from .events import ClientEvent, ServerEvent, build_error_event, build_event, parse_client_event
from .room_broadcaster import MessageBroadcaster, RelayedRoomBroadcaster, RoomBroadcaster
from .rooms import RoomConnection, RoomRegistry, WebSocketConnection, room_name_for

__all__ = [
    "ClientEvent",
    "MessageBroadcaster",
    "RelayedRoomBroadcaster",
    "RoomBroadcaster",
    "RoomConnection",
    "RoomRegistry",
    "ServerEvent",
    "WebSocketConnection",
    "build_error_event",
    "build_event",
    "parse_client_event",
    "room_name_for",
]
