"""Shared test fixtures."""

from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, create_engine

from chatmemory.core.database import get_store
from chatmemory.services.llm.base import BaseLLMProvider, LLMResponse, Message
from chatmemory.services.store import ConversationStore

# In-memory SQLite with StaticPool so all connections (including threads) share one DB
test_engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


class FakeProvider(BaseLLMProvider):
    """Replies with a fixed text and records every context window it was sent."""

    def __init__(self, reply: str = "Hello from bot", error: Exception | None = None):
        self.reply = reply
        self.error = error
        self.calls: list[list[Message]] = []

    async def chat(self, messages: list[Message]) -> LLMResponse:
        self.calls.append(list(messages))
        if self.error:
            raise self.error
        return LLMResponse(content=self.reply)


@pytest.fixture(autouse=True)
def setup_test_db():
    """Create all tables before each test, drop after."""
    import chatmemory.models.conversation  # noqa: F401 - register models
    SQLModel.metadata.create_all(test_engine)
    yield
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def engine():
    return test_engine


@pytest.fixture
def store():
    return ConversationStore(test_engine)


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(store, provider):
    """FastAPI TestClient with storage and LLM patched."""
    with (
        patch("chatmemory.main.get_store", return_value=store),
        patch("chatmemory.api.chat.get_store", return_value=store),
        patch("chatmemory.api.chat.get_llm_provider", return_value=provider),
    ):
        from chatmemory.main import app

        app.dependency_overrides[get_store] = lambda: store

        with TestClient(app) as c:
            yield c

        app.dependency_overrides.clear()
