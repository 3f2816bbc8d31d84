# campuschat/repositories/__init__.py
"""
Repository layer for the chat service.

Key Components:
- BaseRepository: Foundation for all repositories with generic CRUD operations
- IRepository: Interface defining required methods for all repositories
- RepositoryFactory: Factory for creating repository instances
- MessageRepository: Message history, unread counts and read marking
- UserRepository: Principal lookups

Usage:
    from campuschat.repositories import RepositoryFactory

    repository = RepositoryFactory.create_message_repository(db)
    history = repository.find_between(user_a_id, user_b_id, load_participants=True)
"""

from .base_repository import BaseRepository, IRepository
from .factory import RepositoryFactory
from .message_repository import MessageRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "IRepository",
    "MessageRepository",
    "RepositoryFactory",
    "UserRepository",
]
