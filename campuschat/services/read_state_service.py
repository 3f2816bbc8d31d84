# campuschat/services/read_state_service.py
"""
Read-State Service.

Only the receiver of a message can mark it read, and a read message never
goes back to unread.
"""

import logging
from typing import Sequence

from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException, ServiceException
from ..repositories.factory import RepositoryFactory
from ..repositories.message_repository import MessageRepository
from .base import BaseService

logger = logging.getLogger(__name__)


class ReadStateService(BaseService):
    def __init__(self, db: Session):
        super().__init__(db)
        self.repository: MessageRepository = RepositoryFactory.create_message_repository(db)
        self.logger = logging.getLogger(__name__)

    @BaseService.measure_operation("mark_messages_as_read")
    def mark_messages_as_read(self, user_id: str, message_ids: Sequence[str]) -> int:
        """
        Mark the given messages read on behalf of their receiver.

        Ids the user did not receive, unknown ids and already-read messages
        are skipped, so repeating the call is harmless.

        Returns:
            Number of messages that changed from unread to read
        """
        if not message_ids:
            return 0
        try:
            with self.transaction():
                return self.repository.mark_messages_as_read(message_ids, user_id)
        except (RepositoryException, ServiceException) as e:
            self.logger.error(f"Failed to mark messages as read for {user_id}: {str(e)}")
            raise ServiceException("Failed to mark messages as read")
