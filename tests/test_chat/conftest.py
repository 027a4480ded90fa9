"""Shared fixtures for chat core tests."""

from typing import Callable, Optional
from uuid import uuid4

import httpx
import pytest

from agent_chat.chat.orchestrator import StreamOrchestrator
from agent_chat.models.chat_models import AgentRecord, CredentialRecord
from agent_chat.settings import Settings
from tests.test_chat.fakes import (
    OWNER_ID,
    InMemoryAgentStore,
    InMemoryConversationStore,
    InMemoryCredentialStore,
    build_registry,
)


@pytest.fixture
def settings() -> Settings:
    return Settings(
        jwt_secret_key="test-secret-key-for-jwt-testing-only-not-for-production",
        api_key_encryption_key="k" * 32,
        database_url=None,
        default_model="gpt-3.5-turbo",
        credential_fallback_enabled=True,
    )


@pytest.fixture
def agent() -> AgentRecord:
    return AgentRecord(
        id=uuid4(),
        owner_id=OWNER_ID,
        name="Helper",
        model="gpt-4o",
        system_prompt="You are a concise assistant.",
        temperature=0.3,
        max_tokens=256,
    )


@pytest.fixture
def openai_credential() -> CredentialRecord:
    return CredentialRecord(
        id=uuid4(),
        owner_id=OWNER_ID,
        service="OpenAI",
        name="Personal",
        api_key_encrypted="plain:sk-test",
    )


@pytest.fixture
def conversation_store() -> InMemoryConversationStore:
    return InMemoryConversationStore()


@pytest.fixture
def make_orchestrator(settings, agent, openai_credential, conversation_store):
    """Build an orchestrator wired to in-memory stores and a mocked upstream."""

    def _make(
        handler: Callable[[httpx.Request], httpx.Response],
        agents: Optional[list[AgentRecord]] = None,
        credentials: Optional[list[CredentialRecord]] = None,
        orchestrator_settings: Optional[Settings] = None,
    ) -> StreamOrchestrator:
        return StreamOrchestrator(
            agent_store=InMemoryAgentStore(agents if agents is not None else [agent]),
            credential_store=InMemoryCredentialStore(
                credentials if credentials is not None else [openai_credential]
            ),
            conversation_store=conversation_store,
            adapters=build_registry(handler),
            settings=orchestrator_settings or settings,
        )

    return _make
