# campuschat/api/dependencies/__init__.py
"""
FastAPI dependencies for routes.
"""

from ...database import get_db
from .auth import get_current_active_user, require_admin
from .services import (
    get_conversation_service,
    get_message_service,
    get_read_state_service,
    get_room_broadcaster,
    get_room_registry,
)

__all__ = [
    "get_conversation_service",
    "get_current_active_user",
    "get_db",
    "get_message_service",
    "get_read_state_service",
    "get_room_broadcaster",
    "get_room_registry",
    "require_admin",
]
