# campuschat/models/user.py
"""
User model for the advising platform.

Students, advisors and admins share this table and are told apart by
``role``. Account management lives with the identity provider; the chat
service only looks principals up by id.
"""

from enum import Enum

from sqlalchemy import Boolean, Column, String
from sqlalchemy import Enum as SAEnum

from ..core.timezone_utils import utc_now
from ..core.ulid_helper import generate_ulid
from ..database import Base
from .types import UTCDateTime


class UserRole(str, Enum):
    """Roles a principal can hold."""

    STUDENT = "student"
    ADVISOR = "advisor"
    ADMIN = "admin"


class User(Base):
    """
    Principal known to the platform.

    Attributes:
        id: ULID primary key
        name: Unique display name
        email: Unique email address
        role: student, advisor or admin
        is_active: Whether the account may authenticate
        created_at: Account creation timestamp
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, default=generate_ulid)
    name = Column(String(255), unique=True, nullable=False)
    email = Column(String(255), unique=True, nullable=False, index=True)
    role = Column(
        SAEnum(UserRole, name="user_role", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=UserRole.STUDENT,
    )
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(UTCDateTime, nullable=False, default=utc_now)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, name={self.name}, role={self.role})>"
