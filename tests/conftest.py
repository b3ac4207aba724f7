"""Test configuration and fixtures for the RAG chat backend."""

import json
import os
from typing import Any, Dict, List

# Settings are read at import time, so the environment must be prepared first.
os.environ["CREATE_TABLES_ON_STARTUP"] = "false"
os.environ["OPENAI_API_KEY"] = ""
os.environ["CHAT_MODELS"] = ""
os.environ["LOG_FILE_ENABLED"] = "false"

import httpx  # noqa: E402
import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from httpx import ASGITransport, AsyncClient  # noqa: E402
from sqlalchemy import event  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from ragchat.infrastructure.completion import CompletionGateway  # noqa: E402
from ragchat.infrastructure.database import Base, async_session  # noqa: E402
from ragchat.infrastructure.embedding import EmbeddingGateway  # noqa: E402
from ragchat.infrastructure.logging import configure_testing_logging  # noqa: E402
from ragchat.interfaces.api.dependencies import (  # noqa: E402
    get_completion_gateway_dependency,
    get_embedding_gateway_dependency,
)
from ragchat.interfaces.main import app  # noqa: E402
from ragchat.modules import models  # noqa: E402,F401

TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"
PROVIDER_BASE_URL = "https://provider.test/v1"
TEST_API_KEY = "sk-test-1234"

# Each dimension counts one keyword, plus a constant so no vector is all zeros.
EMBEDDING_VOCABULARY = ["apple", "banana", "cherry", "engine", "river", "mountain", "music", "code"]


def keyword_embedding(text: str) -> List[float]:
    lowered = text.lower()
    return [float(lowered.count(word)) for word in EMBEDDING_VOCABULARY] + [0.1]


class FakeProvider:
    """In-process stand-in for the OpenAI-compatible API.

    Embeddings are keyword counts so similarity is predictable; completions
    return ``answer`` with fixed usage. Every request is recorded.
    """

    def __init__(self):
        self.requests: List[Dict[str, Any]] = []
        self.answer = "Die Antwort steht in [1]."
        self.usage: Dict[str, int] | None = {"prompt_tokens": 120, "completion_tokens": 8, "total_tokens": 128}
        self.embedding_status = 200
        self.completion_status = 200

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content)
        self.requests.append({"path": request.url.path, "body": body, "headers": dict(request.headers)})

        if request.url.path.endswith("/embeddings"):
            if self.embedding_status != 200:
                return httpx.Response(self.embedding_status, json={"error": {"message": "embedding failed"}})
            data = [{"index": i, "embedding": keyword_embedding(text)} for i, text in enumerate(body["input"])]
            return httpx.Response(200, json={"data": data})

        if request.url.path.endswith("/chat/completions"):
            if self.completion_status != 200:
                return httpx.Response(self.completion_status, json={"error": {"message": "invalid api key"}})
            payload: Dict[str, Any] = {"choices": [{"message": {"role": "assistant", "content": self.answer}}]}
            if self.usage is not None:
                payload["usage"] = self.usage
            return httpx.Response(200, json=payload)

        return httpx.Response(404, json={"error": "unknown endpoint"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def requests_to(self, suffix: str) -> List[Dict[str, Any]]:
        return [request for request in self.requests if request["path"].endswith(suffix)]


@pytest.fixture(autouse=True)
def quiet_logging():
    configure_testing_logging()


@pytest.fixture
def fake_provider() -> FakeProvider:
    return FakeProvider()


@pytest.fixture
def embedding_gateway(fake_provider: FakeProvider) -> EmbeddingGateway:
    return EmbeddingGateway(base_url=PROVIDER_BASE_URL, transport=fake_provider.transport)


@pytest.fixture
def completion_gateway(fake_provider: FakeProvider) -> CompletionGateway:
    return CompletionGateway(base_url=PROVIDER_BASE_URL, transport=fake_provider.transport)


@pytest_asyncio.fixture(scope="function")
async def test_db_engine():
    """Create an in-memory SQLite engine with all tables."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )

    @event.listens_for(engine.sync_engine, "connect")
    def enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def db_session(test_db_engine):
    """Create a test database session."""
    session_factory = async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session


@pytest_asyncio.fixture(scope="function")
async def client(test_db_engine, embedding_gateway: EmbeddingGateway, completion_gateway: CompletionGateway):
    """Create a test client; each request gets its own database session."""
    session_factory = async_sessionmaker(test_db_engine, class_=AsyncSession, expire_on_commit=False)

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides = {
        async_session: override_get_db,
        get_embedding_gateway_dependency: lambda: embedding_gateway,
        get_completion_gateway_dependency: lambda: completion_gateway,
    }

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac

    app.dependency_overrides = {}


@pytest.fixture
def owner_headers() -> Dict[str, str]:
    return {"X-Owner-Id": "owner-a"}


@pytest.fixture
def other_owner_headers() -> Dict[str, str]:
    return {"X-Owner-Id": "owner-b"}


@pytest_asyncio.fixture
async def configured_owner(client: AsyncClient, owner_headers: Dict[str, str]) -> Dict[str, str]:
    """Owner whose profile already holds a provider key."""
    response = await client.put("/api/v1/profile", json={"openai_api_key": TEST_API_KEY}, headers=owner_headers)
    assert response.status_code == 200
    return owner_headers
