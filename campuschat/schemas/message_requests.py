# campuschat/schemas/message_requests.py
"""
Request schemas for the chat system.
"""

from typing import Annotated, List

from pydantic import Field

from ..core.config import settings
from ..core.ulid_helper import ULID_PATTERN
from ._strict_base import StrictRequestModel

MessageId = Annotated[str, Field(pattern=ULID_PATTERN)]


class SendMessageRequest(StrictRequestModel):
    """Request to send a direct message."""

    receiver_id: str = Field(..., pattern=ULID_PATTERN, description="ULID of the receiving user")
    content: str = Field(
        ...,
        min_length=1,
        max_length=settings.message_max_length,
        description="Message body",
    )


class MarkMessagesReadRequest(StrictRequestModel):
    """Request to mark messages as read. An empty list is accepted and marks nothing."""

    message_ids: List[MessageId] = Field(..., description="Message IDs to mark as read")


# Ensure models are fully built for FastAPI dependency resolution in tests.
SendMessageRequest.model_rebuild()
MarkMessagesReadRequest.model_rebuild()
