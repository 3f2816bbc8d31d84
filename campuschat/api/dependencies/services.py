# campuschat/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

This module provides factory functions that create service instances
with their required dependencies properly injected. The room registry and
broadcaster are owned by the application and read from ``app.state``.
"""

import logging

from fastapi import Depends, Request
from sqlalchemy.orm import Session

from ...database import get_db
from ...services.conversation_service import ConversationService
from ...services.message_service import MessageService
from ...services.messaging.room_broadcaster import MessageBroadcaster
from ...services.messaging.rooms import RoomRegistry
from ...services.read_state_service import ReadStateService

logger = logging.getLogger(__name__)


def get_room_registry(request: Request) -> RoomRegistry:
    return request.app.state.room_registry


def get_room_broadcaster(request: Request) -> MessageBroadcaster:
    return request.app.state.room_broadcaster


def get_message_service(
    db: Session = Depends(get_db),
    broadcaster: MessageBroadcaster = Depends(get_room_broadcaster),
) -> MessageService:
    """Get message service instance wired to the application's broadcaster."""
    return MessageService(db, broadcaster=broadcaster)


def get_conversation_service(db: Session = Depends(get_db)) -> ConversationService:
    return ConversationService(db)


def get_read_state_service(db: Session = Depends(get_db)) -> ReadStateService:
    return ReadStateService(db)
