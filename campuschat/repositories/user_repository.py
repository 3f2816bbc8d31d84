# campuschat/repositories/user_repository.py
"""
User Repository.

Principal lookup surface used by the chat core. Account management
belongs to the identity provider, so only reads by id live here.
"""

from sqlalchemy.orm import Session

from ..models.user import User
from .base_repository import BaseRepository


class UserRepository(BaseRepository[User]):
    """Repository for principal lookups."""

    def __init__(self, db: Session):
        super().__init__(db, User)
