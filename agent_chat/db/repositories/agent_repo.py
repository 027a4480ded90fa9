"""Agent read access for the chat service."""

import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agent_chat.db.models.agent import AgentORM
from agent_chat.db.repositories.base import BaseRepository
from agent_chat.models.chat_models import AgentRecord

logger = logging.getLogger(__name__)


class AgentRepository(BaseRepository[AgentORM]):
    """Session-scoped queries over the ``agent`` table."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, AgentORM)

    async def get_owned(self, agent_id: UUID, owner_id: UUID) -> Optional[AgentORM]:
        """Return the agent only if ``owner_id`` owns it.

        Args:
            agent_id: Agent UUID.
            owner_id: Caller UUID.

        Returns:
            AgentORM or None when missing or owned by someone else.
        """
        stmt = select(AgentORM).where(AgentORM.id == agent_id, AgentORM.owner_id == owner_id)
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()


def to_agent_record(agent: AgentORM) -> AgentRecord:
    """Convert an ORM row to the immutable record used during a chat call."""
    return AgentRecord(
        id=agent.id,
        owner_id=agent.owner_id,
        name=agent.name,
        model=agent.model,
        system_prompt=agent.system_prompt,
        temperature=agent.temperature,
        max_tokens=agent.max_tokens,
    )


class SQLAgentStore:
    """``AgentStore`` backed by PostgreSQL.

    Args:
        session_factory: Factory for short-lived sessions (one per call).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, agent_id: UUID, owner_id: UUID) -> Optional[AgentRecord]:
        async with self._session_factory() as session:
            agent = await AgentRepository(session).get_owned(agent_id, owner_id)
            if agent is None:
                logger.info("agent_lookup_miss: agent_id=%s, owner_id=%s", agent_id, owner_id)
                return None
            return to_agent_record(agent)
