# campuschat/services/__init__.py
"""
Service layer for the chat service.

Services own business rules and transactions; routes stay thin and
repositories own queries.
"""

from .base import BaseService
from .conversation_service import ConversationService, ConversationSummary
from .message_service import MessageService, MessageView
from .read_state_service import ReadStateService

__all__ = [
    "BaseService",
    "ConversationService",
    "ConversationSummary",
    "MessageService",
    "MessageView",
    "ReadStateService",
]
