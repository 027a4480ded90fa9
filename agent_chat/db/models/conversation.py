"""Conversation and Message ORM models."""

import enum
from datetime import datetime
from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Text,
    func,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agent_chat.db.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from agent_chat.db.models.agent import AgentORM


class MessageRoleEnum(str, enum.Enum):
    """Role of a message sender."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationORM(Base, UUIDMixin, TimestampMixin):
    """A conversation between one user and one agent.

    Maps to the ``conversation`` table.
    """

    __tablename__ = "conversation"
    __table_args__ = (Index("idx_conversation_owner_agent", "owner_id", "agent_id"),)

    agent_id: Mapped[UUID] = mapped_column(ForeignKey("agent.id", ondelete="CASCADE"), nullable=False)
    owner_id: Mapped[UUID] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    message_count: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    last_message_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now()
    )

    # Relationships
    agent: Mapped["AgentORM"] = relationship("AgentORM", back_populates="conversations")
    messages: Mapped[List["MessageORM"]] = relationship(
        "MessageORM", back_populates="conversation", cascade="all, delete-orphan"
    )


class MessageORM(Base, UUIDMixin):
    """Individual message within a conversation.

    Messages are immutable -- no updated_at column. ``position`` is the
    conversation's message count at append time and defines message order.
    Maps to the ``message`` table.
    """

    __tablename__ = "message"
    __table_args__ = (
        CheckConstraint(
            "role IN ('user', 'assistant', 'system')",
            name="ck_message_role",
        ),
        Index("idx_message_conversation_order", "conversation_id", "position"),
    )

    conversation_id: Mapped[UUID] = mapped_column(
        ForeignKey("conversation.id", ondelete="CASCADE"), nullable=False
    )
    role: Mapped[str] = mapped_column(Text, nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    model: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, server_default=text("0"))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    conversation: Mapped["ConversationORM"] = relationship(
        "ConversationORM", back_populates="messages"
    )
