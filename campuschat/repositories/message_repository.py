# campuschat/repositories/message_repository.py
"""
Message Repository for the chat system.

Implements all data access operations for direct messages: creation,
pairwise history, per-user listings for conversation aggregation,
unread counting and receiver-scoped read marking.
"""

import logging
from typing import List, Sequence, cast

from sqlalchemy import and_, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import utc_now
from ..models.message import Message
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class MessageRepository(BaseRepository[Message]):
    """
    Repository for message data access.

    Participants are only joined when the caller passes
    ``load_participants=True``.
    """

    def __init__(self, db: Session):
        """Initialize with Message model."""
        super().__init__(db, Message)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Message.sender), joinedload(Message.receiver))

    def create_message(self, sender_id: str, receiver_id: str, content: str) -> Message:
        """
        Persist a new unread message with a server-assigned timestamp.

        Args:
            sender_id: ID of the sending principal
            receiver_id: ID of the receiving principal
            content: Message body

        Returns:
            Created message (flushed, not committed)
        """
        message = self.create(
            sender_id=sender_id,
            receiver_id=receiver_id,
            content=content,
            timestamp=utc_now(),
            read=False,
        )
        self.logger.debug(f"Created message {message.id} from {sender_id} to {receiver_id}")
        return message

    def find_between(
        self, user_a_id: str, user_b_id: str, load_participants: bool = False
    ) -> List[Message]:
        """
        Get every message exchanged between two principals, oldest first.

        Ties on timestamp are broken by id so repeated reads agree.
        """
        try:
            query = self.db.query(Message).filter(
                or_(
                    and_(Message.sender_id == user_a_id, Message.receiver_id == user_b_id),
                    and_(Message.sender_id == user_b_id, Message.receiver_id == user_a_id),
                )
            )
            if load_participants:
                query = self._apply_eager_loading(query)
            return cast(
                List[Message], query.order_by(Message.timestamp.asc(), Message.id.asc()).all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching messages between {user_a_id} and {user_b_id}: {str(e)}")
            raise RepositoryException(f"Failed to fetch messages: {str(e)}")

    def find_involving(self, user_id: str, load_participants: bool = False) -> List[Message]:
        """Get every message sent or received by a user, newest first."""
        try:
            query = self.db.query(Message).filter(
                or_(Message.sender_id == user_id, Message.receiver_id == user_id)
            )
            if load_participants:
                query = self._apply_eager_loading(query)
            return cast(
                List[Message], query.order_by(Message.timestamp.desc(), Message.id.desc()).all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error fetching messages for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to fetch user messages: {str(e)}")

    def count_unread_from(self, sender_id: str, receiver_id: str) -> int:
        """Count unread messages sent by ``sender_id`` to ``receiver_id``."""
        try:
            return cast(
                int,
                self.db.query(Message)
                .filter(
                    Message.sender_id == sender_id,
                    Message.receiver_id == receiver_id,
                    Message.read == False,  # noqa: E712
                )
                .count(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting unread messages from {sender_id}: {str(e)}")
            raise RepositoryException(f"Failed to count unread messages: {str(e)}")

    def count_unread_for_user(self, user_id: str) -> int:
        """Count all unread messages received by a user."""
        try:
            return cast(
                int,
                self.db.query(Message)
                .filter(Message.receiver_id == user_id, Message.read == False)  # noqa: E712
                .count(),
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting unread messages for {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to count unread messages: {str(e)}")

    def mark_messages_as_read(self, message_ids: Sequence[str], user_id: str) -> int:
        """
        Mark messages as read for their receiver.

        Ids received by someone else, or already read, are left alone.

        Args:
            message_ids: Message IDs to mark
            user_id: ID of the receiving user

        Returns:
            Number of messages that changed state
        """
        ids = list(dict.fromkeys(message_ids))
        if not ids:
            return 0
        try:
            count = cast(
                int,
                self.db.query(Message)
                .filter(
                    Message.id.in_(ids),
                    Message.receiver_id == user_id,
                    Message.read == False,  # noqa: E712
                )
                .update({Message.read: True}, synchronize_session="fetch"),
            )
            self.logger.info(f"Marked {count} messages as read for user {user_id}")
            return count
        except SQLAlchemyError as e:
            self.logger.error(f"Error marking messages as read: {str(e)}")
            raise RepositoryException(f"Failed to mark messages as read: {str(e)}")
