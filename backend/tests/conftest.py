"""Shared test fixtures for the Bolt Assistant backend."""

import asyncio
from collections.abc import AsyncGenerator
from typing import Any

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from boltchat.agent.engine import ConversationEngine
from boltchat.completion import CompletionClient
from boltchat.config import Settings
from boltchat.credentials.store import CredentialStore
from boltchat.dependencies import get_credential_store, get_engine, get_session_directory
from boltchat.main import app
from boltchat.memory.chat_store import InMemorySessionStore
from boltchat.memory.directory import SessionDirectory
from boltchat.personality.loader import Persona

TEST_API_KEY = "sk-test-0123456789abcdef"


def completion_body(content: Any) -> dict[str, Any]:
    """Success body in the chat-completions shape."""
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "choices": [{"index": 0, "message": {"role": "assistant", "content": content}}],
    }


class FakeEndpoint:
    """Stands in for the completion endpoint behind ``httpx.MockTransport``.

    Records every request. Set ``status_code``/``body`` to shape the answer,
    ``error`` to raise a transport exception, or ``gate`` to hold the
    response until the test releases it.
    """

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.received = asyncio.Event()
        self.status_code = 200
        self.body: Any = completion_body("42")
        self.error: Exception | None = None
        self.gate: asyncio.Event | None = None

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        self.received.set()
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        if isinstance(self.body, (str, bytes)):
            return httpx.Response(self.status_code, content=self.body)
        return httpx.Response(self.status_code, json=self.body)


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        _env_file=None,
        openai_api_key="",
        openai_base_url="https://llm.test/v1",
        openai_model="gpt-3.5-turbo",
        max_tokens=300,
        request_timeout=30.0,
        session_backend="memory",
    )


@pytest.fixture
def endpoint() -> FakeEndpoint:
    return FakeEndpoint()


@pytest.fixture
def credentials() -> CredentialStore:
    return CredentialStore(TEST_API_KEY)


@pytest.fixture
def persona() -> Persona:
    return Persona(
        name="Bolt",
        system_prompt="You are Bolt, a senior software developer.",
        welcome="Hello! I'm Bolt. What can I help you build today?",
        credential_missing_reply=(
            "I can't connect to the AI service. Please configure your OpenAI API key "
            "in the Settings screen."
        ),
    )


@pytest_asyncio.fixture
async def completion_client(
    endpoint: FakeEndpoint, credentials: CredentialStore, test_settings: Settings
) -> AsyncGenerator[CompletionClient, None]:
    client = CompletionClient(
        credentials, test_settings, transport=httpx.MockTransport(endpoint)
    )
    await client.initialize()
    yield client
    await client.close()


@pytest_asyncio.fixture
async def directory() -> SessionDirectory:
    directory = SessionDirectory(InMemorySessionStore())
    await directory.initialize()
    return directory


@pytest.fixture
def engine(
    completion_client: CompletionClient,
    credentials: CredentialStore,
    directory: SessionDirectory,
    persona: Persona,
) -> ConversationEngine:
    return ConversationEngine(completion_client, credentials, directory, persona)


@pytest_asyncio.fixture
async def client(
    engine: ConversationEngine,
    credentials: CredentialStore,
    directory: SessionDirectory,
) -> AsyncGenerator[AsyncClient, None]:
    """Async HTTP client for testing FastAPI endpoints."""
    app.dependency_overrides[get_engine] = lambda: engine
    app.dependency_overrides[get_credential_store] = lambda: credentials
    app.dependency_overrides[get_session_directory] = lambda: directory

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac

    app.dependency_overrides.clear()
