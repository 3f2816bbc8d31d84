# campuschat/schemas/conversation.py
"""
Conversation list schemas.
"""

from datetime import datetime

from pydantic import ConfigDict

from ._strict_base import StrictModel


class ConversationUser(StrictModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True, from_attributes=True)

    id: str
    name: str
    role: str


class ConversationLastMessage(StrictModel):
    model_config = ConfigDict(extra="forbid", validate_assignment=True, from_attributes=True)

    id: str
    content: str
    timestamp: datetime
    sender_id: str


class ConversationResponse(StrictModel):
    """One conversation in the caller's list, keyed by the other participant."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, from_attributes=True)

    other_user: ConversationUser
    last_message: ConversationLastMessage
    unread_count: int
