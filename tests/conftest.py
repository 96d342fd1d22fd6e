"""Pytest fixtures and configuration for user directory tests."""

import os
from datetime import datetime, timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient

# Keep the app's module-level engine off the developer database.
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")

from userdirectory.database.database import Base, get_db
from userdirectory.database import models  # noqa: F401
from userdirectory.database.user_repository import UserRepository
from userdirectory.models.user import UserCreate
from userdirectory.services.user_service import UserService


# Use in-memory SQLite database for tests
TEST_DATABASE_URL = "sqlite:///:memory:"


class FakeClock:
    """Deterministic clock: every call is one minute later than the previous one."""

    def __init__(self, start: datetime = datetime(2026, 1, 1, 9, 0, 0)):
        self.current = start

    def __call__(self) -> datetime:
        self.current = self.current + timedelta(minutes=1)
        return self.current


@pytest.fixture(scope="function")
def db_session():
    """Create a database session for testing.

    Uses an in-memory SQLite database that is created fresh for each test.
    """
    engine = create_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        echo=False,
    )
    Base.metadata.create_all(bind=engine)

    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)
    session = TestingSessionLocal()

    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def user_repository(db_session: Session):
    """Create a UserRepository instance for testing."""
    return UserRepository(db_session)


@pytest.fixture
def user_service(user_repository, clock):
    """Create a UserService with a deterministic clock."""
    return UserService(user_repository, clock=clock)


@pytest.fixture
def make_user(user_service):
    """Factory that creates users through the service."""
    def _make(email: str, first_name: str = "Test", last_name: str = "User"):
        return user_service.create_user(
            UserCreate(email=email, first_name=first_name, last_name=last_name)
        )
    return _make


@pytest.fixture
def sample_users(make_user):
    """Alice, Bob and Charlie (all active)."""
    return [
        make_user("alice@example.com", "Alice", "Anderson"),
        make_user("bob@example.com", "Bob", "Brown"),
        make_user("charlie@example.com", "Charlie", "Clark"),
    ]


@pytest.fixture
def test_client(db_session: Session, clock):
    """Create a FastAPI test client bound to the test database and clock."""
    from userdirectory.api.app import app, get_user_service

    # Override the get_db dependency to use our test database session
    def override_get_db():
        try:
            yield db_session
        finally:
            pass  # Don't close the session here, let the fixture handle it

    def override_get_user_service():
        return UserService(UserRepository(db_session), clock=clock)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_user_service] = override_get_user_service

    with TestClient(app) as client:
        yield client

    # Clean up dependency overrides
    app.dependency_overrides.clear()
