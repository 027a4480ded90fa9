"""Repository layer for database access."""

from agent_chat.db.repositories.agent_repo import AgentRepository, SQLAgentStore
from agent_chat.db.repositories.api_connection_repo import (
    ApiConnectionRepository,
    SQLCredentialStore,
)
from agent_chat.db.repositories.base import BaseRepository
from agent_chat.db.repositories.conversation_repo import (
    ConversationRepository,
    ConversationStore,
)

__all__ = [
    "AgentRepository",
    "ApiConnectionRepository",
    "BaseRepository",
    "ConversationRepository",
    "ConversationStore",
    "SQLAgentStore",
    "SQLCredentialStore",
]
