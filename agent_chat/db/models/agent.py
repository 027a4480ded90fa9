"""Agent ORM model."""

from typing import TYPE_CHECKING, List, Optional
from uuid import UUID

from sqlalchemy import CheckConstraint, Float, ForeignKey, Integer, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agent_chat.db.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from agent_chat.db.models.conversation import ConversationORM
    from agent_chat.db.models.user import UserORM

DEFAULT_TEMPERATURE: float = 0.7
DEFAULT_MAX_TOKENS: int = 1024


class AgentORM(Base, UUIDMixin, TimestampMixin):
    """Agent identity and model configuration.

    Each row is owned by one user and edited through the dashboard. The chat
    service only reads agents. Maps to the ``agent`` table.
    """

    __tablename__ = "agent"
    __table_args__ = (
        CheckConstraint("temperature >= 0 AND temperature <= 2", name="ck_agent_temperature"),
        CheckConstraint("max_tokens > 0", name="ck_agent_max_tokens"),
    )

    owner_id: Mapped[UUID] = mapped_column(
        ForeignKey("user.id", ondelete="CASCADE"), nullable=False, index=True
    )

    # Identity
    name: Mapped[str] = mapped_column(Text, nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    # Model config
    model: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    system_prompt: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    temperature: Mapped[float] = mapped_column(
        Float, nullable=False, server_default=text(str(DEFAULT_TEMPERATURE))
    )
    max_tokens: Mapped[int] = mapped_column(
        Integer, nullable=False, server_default=text(str(DEFAULT_MAX_TOKENS))
    )

    # Relationships
    owner: Mapped["UserORM"] = relationship("UserORM", back_populates="agents")
    conversations: Mapped[List["ConversationORM"]] = relationship(
        "ConversationORM", back_populates="agent"
    )
