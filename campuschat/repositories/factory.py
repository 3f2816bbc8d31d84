# campuschat/repositories/factory.py
"""
Repository Factory for the chat service.

Provides centralized creation of repository instances,
ensuring consistent initialization and dependency injection.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

# Avoid circular imports
if TYPE_CHECKING:
    from .message_repository import MessageRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """
    Factory class for creating repository instances.

    Centralizes repository creation so services can be handed doubles in
    tests without touching their constructors.
    """

    @staticmethod
    def create_message_repository(db: Session) -> "MessageRepository":
        """Create repository for message operations."""
        from .message_repository import MessageRepository

        return MessageRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        """Create repository for principal lookups."""
        from .user_repository import UserRepository

        return UserRepository(db)
