"""Shared fixtures for API router tests."""

from typing import AsyncGenerator, Dict
from uuid import uuid4

import pytest
from httpx import ASGITransport, AsyncClient

from agent_chat.api.app import create_app
from agent_chat.api.dependencies import get_orchestrator, get_settings
from agent_chat.chat.orchestrator import StreamOrchestrator
from agent_chat.models.chat_models import AgentRecord, CredentialRecord
from agent_chat.settings import Settings
from tests.credentials import create_access_token
from tests.test_chat.fakes import (
    OWNER_ID,
    InMemoryAgentStore,
    InMemoryConversationStore,
    InMemoryCredentialStore,
    RecordingTransport,
    build_registry,
    openai_sse,
    sse_response,
)


@pytest.fixture
def test_settings() -> Settings:
    """Settings with a JWT secret and no database."""
    return Settings(
        jwt_secret_key="test-secret-key-for-jwt-testing-only-not-for-production",
        api_key_encryption_key="k" * 32,
        database_url=None,
    )


@pytest.fixture
def test_agent() -> AgentRecord:
    return AgentRecord(
        id=uuid4(),
        owner_id=OWNER_ID,
        name="Helper",
        model="gpt-4o-mini",
        system_prompt="You are helpful.",
    )


@pytest.fixture
def upstream() -> RecordingTransport:
    """Mocked OpenAI upstream streaming "Hello, world"."""
    return RecordingTransport(lambda r: sse_response(openai_sse(["Hel", "lo, ", "world"])))


@pytest.fixture
def conversations() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def auth_headers(test_settings: Settings) -> Dict[str, str]:
    """JWT authorization headers for the fixed test user.

    Returns:
        Dictionary with Authorization header containing Bearer token.
    """
    token = create_access_token(user_id=OWNER_ID, email="test@example.com", settings=test_settings)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
async def app(test_settings, test_agent, upstream, conversations):
    """FastAPI application instance for testing.

    Creates a FastAPI app with test overrides:
    - Test settings with JWT secret key
    - Orchestrator wired to in-memory stores and a mocked upstream

    Yields:
        Configured FastAPI application.
    """
    test_app = create_app()

    credential = CredentialRecord(
        id=uuid4(), owner_id=OWNER_ID, service="openai", api_key_encrypted="plain:sk-test"
    )

    def override_get_settings() -> Settings:
        return test_settings

    def override_get_orchestrator() -> StreamOrchestrator:
        return StreamOrchestrator(
            agent_store=InMemoryAgentStore([test_agent]),
            credential_store=InMemoryCredentialStore([credential]),
            conversation_store=conversations,
            adapters=build_registry(upstream),
            settings=test_settings,
        )

    test_app.dependency_overrides[get_settings] = override_get_settings
    test_app.dependency_overrides[get_orchestrator] = override_get_orchestrator

    yield test_app

    test_app.dependency_overrides.clear()


@pytest.fixture
async def client(app) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient bound to the test app, without auth."""
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as ac:
        yield ac


@pytest.fixture
async def auth_client(app, auth_headers) -> AsyncGenerator[AsyncClient, None]:
    """httpx AsyncClient with auth headers pre-configured."""
    transport = ASGITransport(app=app)
    async with AsyncClient(
        transport=transport, base_url="http://test", headers=auth_headers
    ) as ac:
        yield ac


@pytest.fixture
def chat_url(test_agent: AgentRecord) -> str:
    return f"/agents/{test_agent.id}/chat"
