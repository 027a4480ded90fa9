"""ORM models for database tables."""

from agent_chat.db.models.agent import AgentORM
from agent_chat.db.models.api_connection import ApiConnectionORM
from agent_chat.db.models.conversation import ConversationORM, MessageORM, MessageRoleEnum
from agent_chat.db.models.user import UserORM

__all__ = [
    "AgentORM",
    "ApiConnectionORM",
    "ConversationORM",
    "MessageORM",
    "MessageRoleEnum",
    "UserORM",
]
