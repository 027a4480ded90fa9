"""API connection (stored provider credential) ORM model."""

from typing import TYPE_CHECKING, Optional
from uuid import UUID

from sqlalchemy import ForeignKey, Index, Text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agent_chat.db.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from agent_chat.db.models.user import UserORM


class ApiConnectionORM(Base, UUIDMixin, TimestampMixin):
    """A provider API key a user saved in the dashboard.

    ``service`` is the free-text label the user typed ("openai", "OpenAI",
    "open-ai-prod", ...). It is not normalized on write.

    ``api_key_encrypted`` holds ``iv:authTag:ciphertext`` (hex, AES-256-GCM).
    Plaintext keys are never stored. Maps to the ``api_connection`` table.
    """

    __tablename__ = "api_connection"
    __table_args__ = (Index("idx_api_connection_owner", "owner_id", "updated_at"),)

    owner_id: Mapped[UUID] = mapped_column(ForeignKey("user.id", ondelete="CASCADE"), nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    service: Mapped[str] = mapped_column(Text, nullable=False)
    api_key_encrypted: Mapped[str] = mapped_column(Text, nullable=False)
    metadata_json: Mapped[Optional[dict]] = mapped_column("metadata", JSONB, nullable=True)

    # Relationships
    owner: Mapped["UserORM"] = relationship("UserORM", back_populates="api_connections")
