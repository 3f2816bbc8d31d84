# campuschat/models/message.py
"""
Message model for the chat system.

Represents a direct message from one principal to another.
"""

from typing import TYPE_CHECKING, Optional

from sqlalchemy import Boolean, Column, ForeignKey, Index, String, Text
from sqlalchemy.orm import relationship

from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime

if TYPE_CHECKING:
    from .user import User


class Message(Base):
    """
    Direct message between two principals.

    ``timestamp`` is assigned once by the server at creation. ``read`` only
    ever moves from False to True, and only the receiver may move it.
    Relationships are lazy; repositories opt in to loading them.
    """

    __tablename__ = "messages"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    sender_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    receiver_id = Column(String(26), ForeignKey("users.id", ondelete="CASCADE"), nullable=False)
    content = Column(Text, nullable=False)
    timestamp = Column(UTCDateTime, nullable=False, default=utc_now)
    read = Column(Boolean, nullable=False, default=False)

    sender = relationship("User", foreign_keys=[sender_id])
    receiver = relationship("User", foreign_keys=[receiver_id])

    __table_args__ = (
        Index("idx_messages_pair_timestamp", "sender_id", "receiver_id", "timestamp"),
        Index("idx_messages_receiver_unread", "receiver_id", "read"),
    )

    def __repr__(self) -> str:
        return f"<Message(id={self.id}, sender={self.sender_id}, receiver={self.receiver_id})>"

    def other_party(self, user_id: str) -> Optional["User"]:
        """The participant that is not ``user_id``."""
        if self.sender_id == user_id:
            return self.receiver
        return self.sender
