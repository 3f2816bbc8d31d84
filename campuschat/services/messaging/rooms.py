# campuschat/services/messaging/rooms.py
"""
Room registry for realtime chat connections.

A connection moves through ``connected -> joined (any number of rooms) ->
disconnected``. The registry is owned by the application and shared by
the WebSocket endpoint and the broadcaster. Mutations hold a
``threading.Lock`` because broadcasts may be started from worker threads;
readers get snapshots and send outside the lock.
"""

from dataclasses import dataclass, field
import logging
import threading
from typing import Any, Dict, List, Protocol, Set

from fastapi import WebSocket

from ...core.ulid_helper import generate_ulid

logger = logging.getLogger(__name__)


def room_name_for(user_a_id: str, user_b_id: str) -> str:
    """Room shared by two principals; order of arguments does not matter."""
    return "-".join(sorted([user_a_id, user_b_id]))


class RoomConnection(Protocol):
    """Anything the registry can deliver frames to."""

    connection_id: str

    async def send_json(self, data: Any) -> None:
        ...


@dataclass(eq=False)
class WebSocketConnection:
    """A live chat socket bound to an authenticated principal."""

    websocket: WebSocket
    user_id: str
    connection_id: str = field(default_factory=generate_ulid)

    async def send_json(self, data: Any) -> None:
        await self.websocket.send_json(data)


class RoomRegistry:
    """Tracks which connections have joined which rooms."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._connections: Dict[str, RoomConnection] = {}
        self._rooms: Dict[str, Set[str]] = {}
        self._memberships: Dict[str, Set[str]] = {}

    def connect(self, connection: RoomConnection) -> None:
        with self._lock:
            self._connections[connection.connection_id] = connection
            self._memberships.setdefault(connection.connection_id, set())
        logger.debug(f"[ROOMS] Connection {connection.connection_id} registered")

    def join(self, connection: RoomConnection, room: str) -> bool:
        """
        Add a connection to a room, registering it first if needed.

        Returns:
            True if the connection was not already a member
        """
        with self._lock:
            self._connections.setdefault(connection.connection_id, connection)
            members = self._rooms.setdefault(room, set())
            if connection.connection_id in members:
                return False
            members.add(connection.connection_id)
            self._memberships.setdefault(connection.connection_id, set()).add(room)
        logger.info(f"[ROOMS] Connection {connection.connection_id} joined room {room}")
        return True

    def leave(self, connection_id: str, room: str) -> bool:
        """Remove a connection from one room. Returns False if it was not a member."""
        with self._lock:
            members = self._rooms.get(room)
            if not members or connection_id not in members:
                return False
            self._discard_member_locked(connection_id, room)
        logger.info(f"[ROOMS] Connection {connection_id} left room {room}")
        return True

    def disconnect(self, connection_id: str) -> List[str]:
        """
        Forget a connection and remove it from every room.

        Returns:
            Rooms the connection was a member of
        """
        with self._lock:
            self._connections.pop(connection_id, None)
            rooms = sorted(self._memberships.get(connection_id, set()))
            for room in rooms:
                self._discard_member_locked(connection_id, room)
            self._memberships.pop(connection_id, None)
        logger.debug(f"[ROOMS] Connection {connection_id} removed from {len(rooms)} room(s)")
        return rooms

    def members(self, room: str) -> List[RoomConnection]:
        """Snapshot of the connections currently in a room."""
        with self._lock:
            return [
                self._connections[connection_id]
                for connection_id in self._rooms.get(room, set())
                if connection_id in self._connections
            ]

    def rooms_for(self, connection_id: str) -> Set[str]:
        with self._lock:
            return set(self._memberships.get(connection_id, set()))

    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {"connections": len(self._connections), "rooms": len(self._rooms)}

    def _discard_member_locked(self, connection_id: str, room: str) -> None:
        members = self._rooms.get(room)
        if members is not None:
            members.discard(connection_id)
            if not members:
                del self._rooms[room]
        memberships = self._memberships.get(connection_id)
        if memberships is not None:
            memberships.discard(room)
