# campuschat/api/dependencies/auth.py
"""
Authentication dependencies.

The token names the user; the user must still exist and be active.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...auth import get_current_user
from ...core.exceptions import (
    ForbiddenException,
    RepositoryException,
    ServiceException,
    UnauthorizedException,
)
from ...database import get_db
from ...models.user import User, UserRole
from ...repositories.factory import RepositoryFactory

logger = logging.getLogger(__name__)


def load_active_user(db: Session, user_id: str) -> User:
    """
    Resolve the principal behind a token.

    Raises:
        UnauthorizedException: If the user does not exist or is inactive
        ServiceException: If the lookup fails
    """
    try:
        user = RepositoryFactory.create_user_repository(db).get_by_id(
            user_id, load_relationships=False
        )
    except RepositoryException as e:
        logger.error(f"Failed to load user {user_id} for authentication: {str(e)}")
        raise ServiceException("Failed to authenticate user")

    if user is None or not user.is_active:
        logger.warning(f"Token for unknown or inactive user {user_id}")
        raise UnauthorizedException("Could not validate credentials", code="INVALID_CREDENTIALS")
    return user


def get_current_active_user(
    user_id: str = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """Dependency returning the authenticated, active ``User``."""
    return load_active_user(db, user_id)


def require_admin(current_user: User = Depends(get_current_active_user)) -> User:
    """Dependency allowing only admins through."""
    if current_user.role != UserRole.ADMIN:
        raise ForbiddenException("Admin access required", code="ADMIN_REQUIRED")
    return current_user
