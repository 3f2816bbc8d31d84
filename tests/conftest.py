"""
Pytest configuration for the chat service.

Every test gets a fresh in-memory SQLite database. Environment overrides
are applied BEFORE any campuschat import so the module-level settings and
engine never point at a real database.
"""

import os

# CRITICAL: Set test configuration BEFORE any app imports!
os.environ["CI"] = "true"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["AUTO_CREATE_TABLES"] = "false"
os.environ["REALTIME_RELAY_URL"] = ""
os.environ["LOG_LEVEL"] = "WARNING"

from datetime import datetime, timedelta, timezone
import itertools
from typing import Callable, Dict, Optional

from fastapi import FastAPI
from fastapi.testclient import TestClient
import pytest
from sqlalchemy import event
from sqlalchemy.orm import Session, sessionmaker

from campuschat.auth import create_access_token
from campuschat.database import Base, build_engine, get_db, get_session_factory
from campuschat.main import create_app
from campuschat.models.message import Message
from campuschat.models.user import User, UserRole
from campuschat.services.base import BaseService

test_engine = build_engine("sqlite://")


@event.listens_for(test_engine, "connect")
def _enable_foreign_keys(dbapi_connection, connection_record):
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestSessionLocal = sessionmaker(
    autocommit=False, autoflush=False, bind=test_engine, expire_on_commit=False
)

BASE_TIME = datetime(2024, 9, 1, 12, 0, tzinfo=timezone.utc)


@pytest.fixture(scope="function")
def db():
    """Create a new database session for each test."""
    Base.metadata.create_all(bind=test_engine)
    session = TestSessionLocal()

    yield session

    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=test_engine)


@pytest.fixture(autouse=True)
def _reset_service_metrics():
    BaseService._class_metrics.clear()
    yield
    BaseService._class_metrics.clear()


def _create_user(db: Session, name: str, email: str, role: UserRole) -> User:
    user = User(name=name, email=email, role=role)
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def student(db: Session) -> User:
    return _create_user(db, "Sarah Chen", "sarah.chen@example.edu", UserRole.STUDENT)


@pytest.fixture
def student_2(db: Session) -> User:
    return _create_user(db, "Omar Haddad", "omar.haddad@example.edu", UserRole.STUDENT)


@pytest.fixture
def advisor(db: Session) -> User:
    return _create_user(db, "Dr. Priya Nair", "priya.nair@example.edu", UserRole.ADVISOR)


@pytest.fixture
def admin(db: Session) -> User:
    return _create_user(db, "Grace Okafor", "grace.okafor@example.edu", UserRole.ADMIN)


@pytest.fixture
def make_message(db: Session) -> Callable[..., Message]:
    """
    Insert a message directly with a controlled timestamp.

    Timestamps default to one minute apart, in call order.
    """
    counter = itertools.count()

    def _make(
        sender: User,
        receiver: User,
        content: str = "Hello",
        timestamp: Optional[datetime] = None,
        read: bool = False,
    ) -> Message:
        message = Message(
            sender_id=sender.id,
            receiver_id=receiver.id,
            content=content,
            timestamp=timestamp or BASE_TIME + timedelta(minutes=next(counter)),
            read=read,
        )
        db.add(message)
        db.commit()
        return message

    return _make


@pytest.fixture
def ticking_clock(monkeypatch) -> Callable[[], datetime]:
    """Make server-assigned timestamps strictly increasing, one second apart."""
    counter = itertools.count()

    def _now() -> datetime:
        return BASE_TIME + timedelta(seconds=next(counter))

    monkeypatch.setattr("campuschat.repositories.message_repository.utc_now", _now)
    return _now


@pytest.fixture
def app(db: Session) -> FastAPI:
    """A fresh application wired to the test database."""
    application = create_app()

    def override_get_db():
        try:
            yield db
        finally:
            pass

    application.dependency_overrides[get_db] = override_get_db
    application.dependency_overrides[get_session_factory] = lambda: TestSessionLocal
    yield application
    application.dependency_overrides.clear()


@pytest.fixture
def client(app: FastAPI):
    """
    Test client sharing one event loop for HTTP requests and WebSockets.

    The context manager keeps a single portal open so a broadcast triggered
    by an HTTP request reaches sockets opened by the same client.
    """
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def room_registry(app: FastAPI):
    return app.state.room_registry


def _token_for(user: User) -> str:
    return create_access_token({"sub": user.id})


def _auth_headers(user: User) -> Dict[str, str]:
    return {"Authorization": f"Bearer {_token_for(user)}"}


@pytest.fixture
def issue_token() -> Callable[[User], str]:
    return _token_for


@pytest.fixture
def auth_headers_student(student: User) -> Dict[str, str]:
    return _auth_headers(student)


@pytest.fixture
def auth_headers_student_2(student_2: User) -> Dict[str, str]:
    return _auth_headers(student_2)


@pytest.fixture
def auth_headers_advisor(advisor: User) -> Dict[str, str]:
    return _auth_headers(advisor)


@pytest.fixture
def auth_headers_admin(admin: User) -> Dict[str, str]:
    return _auth_headers(admin)
