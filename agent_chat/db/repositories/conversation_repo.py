"""Durable conversation and message storage for chat turns."""

import logging
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from agent_chat.chat.errors import ConversationNotFoundError
from agent_chat.db.models.conversation import ConversationORM, MessageORM
from agent_chat.db.repositories.base import BaseRepository
from agent_chat.models.chat_models import ConversationRecord, MessageRecord, MessageRole

logger = logging.getLogger(__name__)


class ConversationRepository(BaseRepository[ConversationORM]):
    """Session-scoped queries over ``conversation`` and ``message``."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, ConversationORM)

    async def get_for_pair(
        self, conversation_id: UUID, agent_id: UUID, owner_id: UUID, for_update: bool = False
    ) -> Optional[ConversationORM]:
        """Return the conversation only if it belongs to ``(agent_id, owner_id)``."""
        stmt = select(ConversationORM).where(
            ConversationORM.id == conversation_id,
            ConversationORM.agent_id == agent_id,
            ConversationORM.owner_id == owner_id,
        )
        if for_update:
            stmt = stmt.with_for_update()
        result = await self._session.execute(stmt)
        return result.scalar_one_or_none()

    async def list_messages(self, conversation_id: UUID) -> list[MessageORM]:
        """Messages in append order (``position`` is assigned under the row lock)."""
        stmt = (
            select(MessageORM)
            .where(MessageORM.conversation_id == conversation_id)
            .order_by(MessageORM.position)
        )
        result = await self._session.execute(stmt)
        return list(result.scalars().all())


def to_conversation_record(conversation: ConversationORM) -> ConversationRecord:
    return ConversationRecord(
        id=conversation.id,
        agent_id=conversation.agent_id,
        owner_id=conversation.owner_id,
        title=conversation.title,
        message_count=conversation.message_count,
        created_at=conversation.created_at,
    )


def to_message_record(message: MessageORM) -> MessageRecord:
    return MessageRecord(
        id=message.id,
        conversation_id=message.conversation_id,
        role=message.role,
        content=message.content,
        created_at=message.created_at,
    )


class ConversationStore:
    """Conversation persistence used by the chat orchestrator.

    Each operation runs in its own session and commits before returning, so
    the assistant reply can be written after the HTTP response has started
    without depending on a request-scoped session.

    Args:
        session_factory: Factory for short-lived sessions.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def load_or_create(
        self,
        agent_id: UUID,
        owner_id: UUID,
        conversation_id: Optional[UUID] = None,
        title: Optional[str] = None,
    ) -> ConversationRecord:
        """Load a conversation for the pair, or create one when no id is given.

        Args:
            agent_id: Agent UUID.
            owner_id: Caller UUID.
            conversation_id: Existing conversation to continue.
            title: Title for a newly created conversation.

        Returns:
            ConversationRecord.

        Raises:
            ConversationNotFoundError: If ``conversation_id`` is unknown or
                belongs to another agent or owner.
        """
        async with self._session_factory() as session:
            repo = ConversationRepository(session)

            if conversation_id is not None:
                conversation = await repo.get_for_pair(conversation_id, agent_id, owner_id)
                if conversation is None:
                    logger.info(
                        "conversation_not_found: conversation_id=%s, agent_id=%s, owner_id=%s",
                        conversation_id,
                        agent_id,
                        owner_id,
                    )
                    raise ConversationNotFoundError()
                return to_conversation_record(conversation)

            conversation = await repo.create(
                agent_id=agent_id,
                owner_id=owner_id,
                title=title,
                message_count=0,
            )
            await session.commit()
            logger.info(
                "conversation_created: conversation_id=%s, agent_id=%s, owner_id=%s",
                conversation.id,
                agent_id,
                owner_id,
            )
            return to_conversation_record(conversation)

    async def list_messages(self, conversation_id: UUID) -> list[MessageRecord]:
        """Return stored messages oldest-first."""
        async with self._session_factory() as session:
            messages = await ConversationRepository(session).list_messages(conversation_id)
        return [to_message_record(m) for m in messages]

    async def append_message(
        self,
        conversation_id: UUID,
        role: MessageRole,
        content: str,
        model: Optional[str] = None,
    ) -> MessageRecord:
        """Append one message and bump the conversation counters.

        Args:
            conversation_id: Conversation UUID.
            role: USER or ASSISTANT.
            content: Message text.
            model: Model that produced an assistant message.

        Returns:
            The stored MessageRecord.

        Raises:
            ValueError: If ``role`` is SYSTEM (system prompts are never stored).
            ConversationNotFoundError: If the conversation no longer exists.
        """
        role = MessageRole(role)
        if role is MessageRole.SYSTEM:
            raise ValueError("System messages are injected at read time and never stored")

        async with self._session_factory() as session:
            stmt = (
                select(ConversationORM)
                .where(ConversationORM.id == conversation_id)
                .with_for_update()
            )
            conversation = (await session.execute(stmt)).scalar_one_or_none()
            if conversation is None:
                raise ConversationNotFoundError()

            message = MessageORM(
                conversation_id=conversation_id,
                role=role.value,
                content=content,
                model=model,
                position=conversation.message_count,
            )
            session.add(message)
            conversation.message_count += 1
            conversation.last_message_at = datetime.now(timezone.utc)

            await session.flush()
            await session.refresh(message)
            await session.commit()

        logger.info(
            "message_appended: conversation_id=%s, message_id=%s, role=%s, position=%d, chars=%d",
            conversation_id,
            message.id,
            role.value,
            message.position,
            len(content),
        )
        return to_message_record(message)
