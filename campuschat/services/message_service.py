# campuschat/services/message_service.py
"""
Message Service for chat functionality.

Handles business logic for direct messages including:
- Message creation and validation
- Pairwise history retrieval
- Unread counting
- Realtime fan-out of new messages to the pair's room
"""

import asyncio
from dataclasses import asdict, dataclass
from datetime import datetime
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import (
    NotFoundException,
    RepositoryException,
    ServiceException,
    ValidationException,
)
from ..models.message import Message
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.message_repository import MessageRepository
from .base import BaseService
from .messaging.room_broadcaster import MessageBroadcaster
from .messaging.rooms import room_name_for

logger = logging.getLogger(__name__)


@dataclass
class MessageView:
    """Flattened message with participant names, as returned to clients."""

    id: str
    content: str
    timestamp: datetime
    read: bool
    sender_id: str
    receiver_id: str
    sender_name: Optional[str] = None
    receiver_name: Optional[str] = None

    @classmethod
    def from_message(
        cls,
        message: Message,
        sender: Optional[User] = None,
        receiver: Optional[User] = None,
    ) -> "MessageView":
        sender = sender or message.sender
        receiver = receiver or message.receiver
        return cls(
            id=message.id,
            content=message.content,
            timestamp=message.timestamp,
            read=bool(message.read),
            sender_id=message.sender_id,
            receiver_id=message.receiver_id,
            sender_name=sender.name if sender else None,
            receiver_name=receiver.name if receiver else None,
        )

    def to_payload(self) -> Dict[str, Any]:
        """JSON-ready dict for realtime frames."""
        payload = asdict(self)
        payload["timestamp"] = self.timestamp.isoformat()
        return payload


class MessageService(BaseService):
    """
    Service for direct messages between principals.

    The broadcaster is optional; without one, messages are only stored.
    """

    def __init__(
        self,
        db: Session,
        broadcaster: Optional[MessageBroadcaster] = None,
        max_length: Optional[int] = None,
    ):
        """Initialize message service."""
        super().__init__(db)
        self.repository: MessageRepository = RepositoryFactory.create_message_repository(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.broadcaster = broadcaster
        self.max_length = max_length or settings.message_max_length
        self.logger = logging.getLogger(__name__)

    @BaseService.measure_operation("create_message")
    async def create_message(self, sender_id: str, receiver_id: str, content: str) -> MessageView:
        """
        Persist a message and push it to the pair's room.

        The broadcast happens only after the commit and never affects the
        result: a failed broadcast is logged and the stored message is
        still returned.

        Args:
            sender_id: ID of the authenticated sender
            receiver_id: ID of the receiving principal
            content: Message body

        Returns:
            The stored message, unread, with its server-assigned timestamp

        Raises:
            ValidationException: If the content is blank or too long, or the
                sender is messaging themselves
            NotFoundException: If sender or receiver does not exist
            ServiceException: If the lookup or write fails
        """
        self._validate_new_message(sender_id, receiver_id, content)
        self.logger.info(f"Attempting to create message from {sender_id} to {receiver_id}")

        view = await asyncio.to_thread(self._persist_message, sender_id, receiver_id, content)

        room = room_name_for(sender_id, receiver_id)
        if self.broadcaster is not None:
            try:
                await self.broadcaster.broadcast_message(room, view.to_payload())
                self.logger.info(f"Message {view.id} broadcast to room {room}")
            except Exception as e:
                self.logger.error(
                    f"Failed to broadcast message {view.id} to room {room}: {str(e)}",
                    exc_info=True,
                )

        return view

    @BaseService.measure_operation("get_messages")
    def get_messages(self, user_id: str, other_user_id: str) -> List[MessageView]:
        """
        Get the full history between two principals, oldest first.

        No existence check is made; unknown ids simply yield an empty list.
        """
        try:
            messages = self.repository.find_between(
                user_id, other_user_id, load_participants=True
            )
        except RepositoryException as e:
            self.logger.error(f"Failed to load messages for {user_id}/{other_user_id}: {str(e)}")
            raise ServiceException("Failed to retrieve messages")
        return [MessageView.from_message(message) for message in messages]

    @BaseService.measure_operation("get_unread_count")
    def get_unread_count(self, user_id: str) -> int:
        """Total unread messages received by a user."""
        try:
            return self.repository.count_unread_for_user(user_id)
        except RepositoryException as e:
            self.logger.error(f"Failed to count unread messages for {user_id}: {str(e)}")
            raise ServiceException("Failed to retrieve unread count")

    def _validate_new_message(self, sender_id: str, receiver_id: str, content: str) -> None:
        if not content or not content.strip():
            raise ValidationException("Message content cannot be empty")
        if len(content) > self.max_length:
            raise ValidationException(
                f"Message content cannot exceed {self.max_length} characters",
                details={"max_length": self.max_length},
            )
        if sender_id == receiver_id:
            raise ValidationException("Cannot send a message to yourself")

    def _persist_message(self, sender_id: str, receiver_id: str, content: str) -> MessageView:
        sender, receiver = self._resolve_participants(sender_id, receiver_id)

        try:
            with self.transaction():
                message = self.repository.create_message(sender_id, receiver_id, content)
        except (RepositoryException, ServiceException) as e:
            self.logger.error(f"Failed to save message: {str(e)}")
            raise ServiceException("Failed to save message to database.")

        self.logger.info(f"Message successfully saved with ID: {message.id}")
        return MessageView.from_message(message, sender=sender, receiver=receiver)

    def _resolve_participants(self, sender_id: str, receiver_id: str) -> Tuple[User, User]:
        try:
            sender = self.user_repository.get_by_id(sender_id, load_relationships=False)
            receiver = self.user_repository.get_by_id(receiver_id, load_relationships=False)
        except RepositoryException as e:
            self.logger.error(f"Error fetching sender or receiver: {str(e)}")
            raise ServiceException("Failed to fetch users for message creation.")

        if sender is None:
            self.logger.error(f"Sender with ID {sender_id} not found.")
            raise NotFoundException(f"Sender with ID {sender_id} not found")
        if receiver is None:
            self.logger.error(f"Receiver with ID {receiver_id} not found.")
            raise NotFoundException(f"Receiver with ID {receiver_id} not found")
        return sender, receiver
