"""Pydantic models for agents, credentials, conversations, and messages."""

from datetime import datetime
from enum import Enum
from typing import Literal, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class MessageRole(str, Enum):
    """Role of a message sender."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class AgentRecord(BaseModel):
    """Agent configuration as read by the chat service.

    Immutable for the duration of a single chat call.
    """

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    id: UUID
    owner_id: UUID
    name: str
    model: Optional[str] = None
    system_prompt: Optional[str] = None
    temperature: float = Field(default=0.7, ge=0.0, le=2.0)
    max_tokens: int = Field(default=1024, gt=0)


class CredentialRecord(BaseModel):
    """A stored API connection.

    ``service`` is the free-text label the owner typed, and
    ``api_key_encrypted`` is opaque to the chat core.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    owner_id: UUID
    service: str
    name: str = ""
    api_key_encrypted: str = Field(default="", repr=False)


class ConversationRecord(BaseModel):
    """Conversation metadata as returned from the store."""

    model_config = ConfigDict(frozen=True)

    id: UUID
    agent_id: UUID
    owner_id: UUID
    title: Optional[str] = None
    message_count: int = 0
    created_at: datetime


class MessageRecord(BaseModel):
    """A persisted message.

    ``role`` is kept as the raw stored string so that integrity checks can
    reject values outside the known roles instead of coercing them.
    """

    model_config = ConfigDict(frozen=True)

    id: UUID
    conversation_id: UUID
    role: str
    content: str
    created_at: datetime


class ChatMessage(BaseModel):
    """One entry of the ordered context handed to a provider adapter."""

    model_config = ConfigDict(frozen=True)

    role: Literal["system", "user", "assistant"]
    content: str
