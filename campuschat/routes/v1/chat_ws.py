# campuschat/routes/v1/chat_ws.py
"""
Chat WebSocket - API v1

GET /api/v1/chat/ws?token=<jwt>

Clients join the room for a conversation (``room_name_for(a, b)``) to
receive messages sent through the REST API as they are stored. Frames are
``{"event": ..., "data": ...}`` JSON objects; see
``campuschat.services.messaging.events``.
"""

import asyncio
import logging
from typing import Any, Callable, Optional

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Query,
    WebSocket,
    WebSocketDisconnect,
    status,
)
from sqlalchemy.orm import Session

from ...api.dependencies.auth import load_active_user
from ...auth import user_id_from_token
from ...core.exceptions import ServiceException, UnauthorizedException
from ...database import get_session_factory
from ...monitoring.prometheus_metrics import prometheus_metrics
from ...services.messaging.events import (
    ClientEvent,
    ServerEvent,
    build_error_event,
    build_event,
    parse_client_event,
)
from ...services.messaging.room_broadcaster import MessageBroadcaster
from ...services.messaging.rooms import RoomRegistry, WebSocketConnection

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


def _room_from(data: Any) -> Optional[str]:
    if isinstance(data, str) and data.strip():
        return data.strip()
    return None


def _authenticate(session_factory: Callable[[], Session], token: Optional[str]) -> str:
    """Resolve the token to an active user id, using a session of its own."""
    user_id = user_id_from_token(token)
    with session_factory() as db:
        load_active_user(db, user_id)
    return user_id


@router.websocket("/ws")
async def chat_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    session_factory: Callable[[], Session] = Depends(get_session_factory),
) -> None:
    try:
        user_id = await asyncio.to_thread(_authenticate, session_factory, token)
    except (HTTPException, UnauthorizedException):
        logger.info("[CHAT-WS] Rejected connection with missing, invalid or inactive credentials")
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    except ServiceException as e:
        logger.error(f"[CHAT-WS] Could not authenticate connection: {e.message}")
        await websocket.close(code=status.WS_1011_INTERNAL_ERROR)
        return

    registry: RoomRegistry = websocket.app.state.room_registry
    broadcaster: MessageBroadcaster = websocket.app.state.room_broadcaster

    await websocket.accept()
    connection = WebSocketConnection(websocket=websocket, user_id=user_id)
    registry.connect(connection)
    prometheus_metrics.ws_connection_opened()
    logger.info(f"[CHAT-WS] Connection {connection.connection_id} opened for user {user_id}")

    try:
        while True:
            try:
                frame = await websocket.receive_json()
            except (ValueError, KeyError):
                # KeyError: binary frame, receive_json only reads text
                await connection.send_json(build_error_event("Frames must be JSON objects"))
                continue

            event, data = parse_client_event(frame)

            if event is ClientEvent.JOIN_ROOM:
                room = _room_from(data)
                if room is None:
                    await connection.send_json(build_error_event("join_room requires a room name"))
                    continue
                registry.join(connection, room)
                await connection.send_json(build_event(ServerEvent.JOINED_ROOM, room))

            elif event is ClientEvent.LEAVE_ROOM:
                room = _room_from(data)
                if room is None:
                    await connection.send_json(build_error_event("leave_room requires a room name"))
                    continue
                registry.leave(connection.connection_id, room)
                await connection.send_json(build_event(ServerEvent.LEFT_ROOM, room))

            elif event is ClientEvent.SEND_MESSAGE:
                room = _room_from(data.get("room")) if isinstance(data, dict) else None
                if room is None or "message" not in data:
                    await connection.send_json(
                        build_error_event("send_message requires a room and a message")
                    )
                    continue
                # Relayed to the room only; messages are stored through the REST API
                try:
                    await broadcaster.broadcast_message(room, data["message"])
                except Exception as e:
                    logger.error(
                        f"[CHAT-WS] Broadcast to room {room} from connection "
                        f"{connection.connection_id} failed: {str(e)}",
                        exc_info=True,
                    )
                    await connection.send_json(build_error_event("Message could not be delivered"))

            else:
                await connection.send_json(build_error_event("Unknown event"))

    except WebSocketDisconnect as e:
        logger.info(f"[CHAT-WS] Connection {connection.connection_id} closed (code {e.code})")
    finally:
        rooms = registry.disconnect(connection.connection_id)
        prometheus_metrics.ws_connection_closed()
        logger.debug(f"[CHAT-WS] Connection {connection.connection_id} left {len(rooms)} room(s)")
