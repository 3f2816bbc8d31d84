# campuschat/routes/v1/chat.py
"""
Chat routes - API v1

Direct-message endpoints under /api/v1/chat.
All business logic delegated to the chat services.

Endpoints (static routes BEFORE dynamic routes):
    POST /messages - Send a message to another user
    GET /conversations - Conversation list for the current user
    GET /unread-count - Total unread count for the current user
    POST /mark-read - Mark received messages as read
    GET /messages/{other_user_id} - Full history with another user
"""

import logging
from typing import List

from fastapi import APIRouter, Body, Depends, Path, status

from ...api.dependencies.auth import get_current_active_user
from ...api.dependencies.services import (
    get_conversation_service,
    get_message_service,
    get_read_state_service,
)
from ...core.ulid_helper import ULID_PATTERN
from ...models.user import User
from ...schemas.conversation import ConversationResponse
from ...schemas.message_requests import MarkMessagesReadRequest, SendMessageRequest
from ...schemas.message_responses import (
    MarkMessagesReadResponse,
    MessageResponse,
    UnreadCountResponse,
)
from ...services.conversation_service import ConversationService
from ...services.message_service import MessageService
from ...services.read_state_service import ReadStateService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["chat"])


@router.post(
    "/messages",
    response_model=MessageResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {"description": "Message stored and broadcast to the pair's room"},
        400: {"description": "Blank content or message to self"},
        401: {"description": "Not authenticated"},
        404: {"description": "Receiver not found"},
        422: {"description": "Malformed request"},
    },
)
async def send_message(
    request: SendMessageRequest = Body(...),
    current_user: User = Depends(get_current_active_user),
    service: MessageService = Depends(get_message_service),
) -> MessageResponse:
    """
    Send a direct message.

    The sender is always the authenticated user.
    """
    view = await service.create_message(
        sender_id=current_user.id,
        receiver_id=request.receiver_id,
        content=request.content,
    )
    return MessageResponse.model_validate(view)


@router.get(
    "/conversations",
    response_model=List[ConversationResponse],
    responses={401: {"description": "Not authenticated"}},
)
def get_conversations(
    current_user: User = Depends(get_current_active_user),
    service: ConversationService = Depends(get_conversation_service),
) -> List[ConversationResponse]:
    """One entry per person the current user has exchanged messages with, newest first."""
    conversations = service.get_conversations(current_user.id)
    return [ConversationResponse.model_validate(conversation) for conversation in conversations]


@router.get(
    "/unread-count",
    response_model=UnreadCountResponse,
    responses={401: {"description": "Not authenticated"}},
)
def get_unread_count(
    current_user: User = Depends(get_current_active_user),
    service: MessageService = Depends(get_message_service),
) -> UnreadCountResponse:
    """Get total unread message count for current user."""
    count = service.get_unread_count(current_user.id)
    return UnreadCountResponse(unread_count=count, user_id=current_user.id)


@router.post(
    "/mark-read",
    response_model=MarkMessagesReadResponse,
    responses={
        200: {"description": "Messages marked as read"},
        401: {"description": "Not authenticated"},
        422: {"description": "Malformed message ids"},
    },
)
def mark_messages_as_read(
    request: MarkMessagesReadRequest = Body(...),
    current_user: User = Depends(get_current_active_user),
    service: ReadStateService = Depends(get_read_state_service),
) -> MarkMessagesReadResponse:
    """
    Mark messages as read.

    Only messages received by the current user are affected; other ids are
    ignored.
    """
    count = service.mark_messages_as_read(current_user.id, request.message_ids)
    return MarkMessagesReadResponse(
        success=True,
        message="Messages marked as read",
        marked_count=count,
    )


@router.get(
    "/messages/{other_user_id}",
    response_model=List[MessageResponse],
    responses={
        401: {"description": "Not authenticated"},
        422: {"description": "Malformed user id"},
    },
)
def get_messages(
    other_user_id: str = Path(..., pattern=ULID_PATTERN),
    current_user: User = Depends(get_current_active_user),
    service: MessageService = Depends(get_message_service),
) -> List[MessageResponse]:
    """Full message history with another user, oldest first."""
    views = service.get_messages(current_user.id, other_user_id)
    return [MessageResponse.model_validate(view) for view in views]
