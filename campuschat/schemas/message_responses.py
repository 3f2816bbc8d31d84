# campuschat/schemas/message_responses.py
"""
Response schemas for the chat system.
"""

from datetime import datetime
from typing import Optional

from pydantic import ConfigDict, Field

from ._strict_base import StrictModel


class MessageResponse(StrictModel):
    """A message with its participants' names."""

    model_config = ConfigDict(extra="forbid", validate_assignment=True, from_attributes=True)

    id: str
    content: str
    timestamp: datetime
    read: bool
    sender_id: str
    receiver_id: str
    sender_name: Optional[str] = None
    receiver_name: Optional[str] = None


class MarkMessagesReadResponse(StrictModel):
    """Response after marking messages as read."""

    success: bool = True
    message: str = Field(default="Messages marked as read")
    marked_count: int = Field(..., description="Number of messages that changed to read")


class UnreadCountResponse(StrictModel):
    """Unread message count for a user."""

    unread_count: int
    user_id: str
