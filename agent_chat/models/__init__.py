"""Pydantic models shared by the chat core and the persistence layer."""

from agent_chat.models.chat_models import (
    AgentRecord,
    ChatMessage,
    ConversationRecord,
    CredentialRecord,
    MessageRecord,
    MessageRole,
)

__all__ = [
    "AgentRecord",
    "ChatMessage",
    "ConversationRecord",
    "CredentialRecord",
    "MessageRecord",
    "MessageRole",
]
