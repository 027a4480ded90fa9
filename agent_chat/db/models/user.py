"""User ORM model."""

from typing import TYPE_CHECKING, List

from sqlalchemy import Boolean, Text, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from agent_chat.db.base import Base, TimestampMixin, UUIDMixin

if TYPE_CHECKING:
    from agent_chat.db.models.agent import AgentORM
    from agent_chat.db.models.api_connection import ApiConnectionORM


class UserORM(Base, UUIDMixin, TimestampMixin):
    """Dashboard user account; owner of agents and API connections.

    Accounts are created by the dashboard's sign-in flow, not by this service.
    Maps to the ``user`` table.
    """

    __tablename__ = "user"

    email: Mapped[str] = mapped_column(Text, nullable=False, unique=True)
    display_name: Mapped[str] = mapped_column(Text, nullable=False, server_default=text("''"))
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, server_default=text("true"))

    # Relationships
    agents: Mapped[List["AgentORM"]] = relationship("AgentORM", back_populates="owner")
    api_connections: Mapped[List["ApiConnectionORM"]] = relationship(
        "ApiConnectionORM", back_populates="owner"
    )
