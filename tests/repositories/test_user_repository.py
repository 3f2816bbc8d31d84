"""Tests for UserRepository and the shared BaseRepository behavior."""

from unittest.mock import Mock

import pytest
from sqlalchemy.exc import OperationalError

from campuschat.core.exceptions import RepositoryException
from campuschat.models.user import User, UserRole
from campuschat.repositories.factory import RepositoryFactory
from campuschat.repositories.user_repository import UserRepository


class TestUserRepository:
    def test_get_by_id_returns_user(self, db, advisor):
        user = UserRepository(db).get_by_id(advisor.id)

        assert user is not None
        assert user.name == advisor.name
        assert user.role == UserRole.ADVISOR

    def test_get_by_id_missing_returns_none(self, db):
        assert UserRepository(db).get_by_id("01HZZZZZZZZZZZZZZZZZZZZZZZ") is None

    def test_duplicate_email_raises_repository_exception(self, db, student):
        repo = UserRepository(db)

        with pytest.raises(RepositoryException):
            repo.create(name="Another Sarah", email=student.email, role=UserRole.STUDENT)

    def test_get_by_id_wraps_database_errors(self):
        session = Mock()
        session.query.side_effect = OperationalError("SELECT", {}, Exception("db down"))

        with pytest.raises(RepositoryException):
            UserRepository(session).get_by_id("01HZZZZZZZZZZZZZZZZZZZZZZZ")


class TestRepositoryFactory:
    def test_creates_repositories_bound_to_session(self, db):
        message_repo = RepositoryFactory.create_message_repository(db)
        user_repo = RepositoryFactory.create_user_repository(db)

        assert message_repo.db is db
        assert isinstance(user_repo, UserRepository)
        assert user_repo.model is User
