"""Shared test fixtures for backend tests."""

from datetime import timedelta
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from app.core.security import create_access_token
from app.services.chat import ChatHub, Participant, ParticipantRole
from app.services.chat.registry import ConnectionRegistry
from app.services.chat.store import MessageStore

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


class FakeChannel:
    """Records events instead of writing to a socket."""

    def __init__(self, accept: bool = True):
        self.events: list[dict] = []
        self.accept = accept

    def send(self, event: dict) -> bool:
        if not self.accept:
            return False
        self.events.append(event)
        return True

    def of_type(self, kind: str) -> list[dict]:
        return [e for e in self.events if e["type"] == kind]


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import app.models  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def store():
    return MessageStore(test_engine)


@pytest.fixture
def registry():
    return ConnectionRegistry()


@pytest.fixture
def hub():
    return ChatHub(test_engine)


@pytest.fixture
def customer():
    return Participant(7, ParticipantRole.CUSTOMER)


@pytest.fixture
def agent():
    return Participant(1, ParticipantRole.AGENT)


def make_token(user_id: int, role: str = "user", expires: timedelta | None = None) -> str:
    return create_access_token(user_id, role, expires)


def auth_headers(user_id: int, role: str = "user") -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user_id, role)}"}


@pytest.fixture
def client():
    """FastAPI TestClient backed by the in-memory database."""
    with patch("app.core.database.engine", test_engine):
        from app.main import app

        with TestClient(app) as c:
            yield c
