from .message import Message
from .user import User, UserRole

__all__ = ["Message", "User", "UserRole"]
