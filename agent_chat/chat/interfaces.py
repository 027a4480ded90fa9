"""Collaborator contracts consumed by the chat orchestrator.

The orchestrator only depends on these protocols. Concrete implementations
live in ``agent_chat.auth`` and ``agent_chat.db.repositories``; tests use
in-memory fakes.
"""

from typing import Optional, Protocol, Sequence, runtime_checkable
from uuid import UUID

from agent_chat.models.chat_models import (
    AgentRecord,
    ConversationRecord,
    CredentialRecord,
    MessageRecord,
    MessageRole,
)


@runtime_checkable
class AuthContext(Protocol):
    """Identity of the caller for one request."""

    async def resolve_caller_id(self) -> UUID:
        """Return the authenticated owner id.

        Raises:
            UnauthenticatedError: If the request carries no valid identity.
        """
        ...


@runtime_checkable
class AgentStore(Protocol):
    """Read access to agents."""

    async def get(self, agent_id: UUID, owner_id: UUID) -> Optional[AgentRecord]:
        """Return the agent if it exists and is owned by ``owner_id``."""
        ...


@runtime_checkable
class CredentialStore(Protocol):
    """Read access to stored API connections."""

    async def list_for_owner(self, owner_id: UUID) -> list[CredentialRecord]:
        """Return the owner's credentials in listing order."""
        ...

    async def decrypt(self, credential: CredentialRecord) -> str:
        """Return the plaintext secret.

        Raises:
            InvalidCredentialError: If the stored blob cannot be decrypted.
        """
        ...


@runtime_checkable
class ConversationStoreProtocol(Protocol):
    """Durable read/append of conversations and their messages."""

    async def load_or_create(
        self,
        agent_id: UUID,
        owner_id: UUID,
        conversation_id: Optional[UUID] = None,
        title: Optional[str] = None,
    ) -> ConversationRecord:
        """Load the conversation for ``(agent_id, owner_id)`` or create a new one.

        Raises:
            ConversationNotFoundError: If ``conversation_id`` does not belong
                to the pair.
        """
        ...

    async def list_messages(self, conversation_id: UUID) -> Sequence[MessageRecord]:
        """Return stored messages oldest-first."""
        ...

    async def append_message(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
        model: Optional[str] = None,
    ) -> MessageRecord:
        """Append one message. System messages are rejected."""
        ...
