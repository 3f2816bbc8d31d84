# campuschat/services/conversation_service.py
"""
Conversation Service.

Builds each user's conversation list on demand: one entry per distinct
peer, carrying the newest message exchanged with that peer and how many
of the peer's messages the user has not read yet. Nothing is cached.
"""

from dataclasses import dataclass
from datetime import datetime
import logging
from typing import Dict, List

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException, ServiceException
from ..models.user import User
from ..repositories.factory import RepositoryFactory
from ..repositories.message_repository import MessageRepository
from .base import BaseService

logger = logging.getLogger(__name__)


@dataclass
class ConversationPeer:
    id: str
    name: str
    role: str


@dataclass
class LastMessageSummary:
    id: str
    content: str
    timestamp: datetime
    sender_id: str


@dataclass
class ConversationSummary:
    """One row of a user's conversation list."""

    other_user: ConversationPeer
    last_message: LastMessageSummary
    unread_count: int


class ConversationService(BaseService):
    """Per-user conversation aggregation."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository: MessageRepository = RepositoryFactory.create_message_repository(db)
        self.logger = logging.getLogger(__name__)

    @BaseService.measure_operation("get_conversations")
    def get_conversations(self, user_id: str) -> List[ConversationSummary]:
        """
        List the user's conversations, most recently active first.

        Messages are walked newest first, so the first message seen for a
        peer is that conversation's last message. A failed unread count for
        one peer is logged and reported as 0.

        Raises:
            ServiceException: If the user's messages cannot be loaded
        """
        self.logger.info(f"Fetching conversations for user {user_id}")
        try:
            messages = self.repository.find_involving(user_id, load_participants=True)
        except RepositoryException as e:
            self.logger.error(f"Error fetching messages for user {user_id}: {str(e)}")
            raise ServiceException("Failed to retrieve conversations")

        conversations: Dict[str, ConversationSummary] = {}
        for message in messages:
            other_user = message.other_party(user_id)
            if other_user is None:
                self.logger.warning(f"Message {message.id} has a missing sender or receiver")
                continue
            if other_user.id in conversations:
                continue

            conversations[other_user.id] = ConversationSummary(
                other_user=ConversationPeer(
                    id=other_user.id,
                    name=other_user.name,
                    role=_role_value(other_user),
                ),
                last_message=LastMessageSummary(
                    id=message.id,
                    content=message.content,
                    timestamp=message.timestamp,
                    sender_id=message.sender_id,
                ),
                unread_count=self._unread_from(other_user.id, user_id),
            )

        result = sorted(
            conversations.values(),
            key=lambda conversation: conversation.last_message.timestamp,
            reverse=True,
        )
        self.logger.info(f"Returning {len(result)} conversations for user {user_id}")
        return result

    def _unread_from(self, peer_id: str, user_id: str) -> int:
        try:
            return self.repository.count_unread_from(peer_id, user_id)
        except RepositoryException as e:
            self.logger.error(
                f"Error counting unread messages from {peer_id} for {user_id}: {str(e)}"
            )
            return 0


def _role_value(user: User) -> str:
    role = user.role
    return getattr(role, "value", role)
