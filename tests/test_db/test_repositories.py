"""Unit tests for the SQL-backed chat stores (no database required)."""

from datetime import datetime, timezone
from unittest.mock import MagicMock
from uuid import uuid4

import pytest

from agent_chat.chat.errors import ConversationNotFoundError, InvalidCredentialError
from agent_chat.db.models import AgentORM, ApiConnectionORM, ConversationORM, MessageORM
from agent_chat.db.repositories import (
    ConversationStore,
    SQLAgentStore,
    SQLCredentialStore,
)
from agent_chat.models.chat_models import CredentialRecord, MessageRole
from tests.credentials import encrypt_api_key

ENCRYPTION_KEY = "e" * 32


def scalar_result(value) -> MagicMock:
    """Mock query result for scalar_one_or_none() and scalars().all()."""
    result = MagicMock()
    result.scalar_one_or_none.return_value = value
    result.scalars.return_value.all.return_value = value if isinstance(value, list) else []
    return result


def _conversation(message_count: int = 0) -> ConversationORM:
    return ConversationORM(
        id=uuid4(),
        agent_id=uuid4(),
        owner_id=uuid4(),
        title="t",
        message_count=message_count,
        created_at=datetime.now(timezone.utc),
    )


@pytest.mark.unit
class TestSQLAgentStore:
    """Tests for SQLAgentStore.get()."""

    async def test_returns_record(self, session_factory, db_session) -> None:
        owner_id = uuid4()
        agent = AgentORM(
            id=uuid4(),
            owner_id=owner_id,
            name="Helper",
            model="gpt-4o",
            system_prompt="Be nice.",
            temperature=0.5,
            max_tokens=512,
        )
        db_session.execute.return_value = scalar_result(agent)

        record = await SQLAgentStore(session_factory).get(agent.id, owner_id)

        assert record is not None
        assert record.id == agent.id
        assert record.model == "gpt-4o"
        assert record.max_tokens == 512

    async def test_missing_agent(self, session_factory, db_session) -> None:
        db_session.execute.return_value = scalar_result(None)

        assert await SQLAgentStore(session_factory).get(uuid4(), uuid4()) is None


@pytest.mark.unit
class TestSQLCredentialStore:
    """Tests for SQLCredentialStore."""

    async def test_list_for_owner(self, session_factory, db_session) -> None:
        owner_id = uuid4()
        row = ApiConnectionORM(
            id=uuid4(),
            owner_id=owner_id,
            name="Work",
            service="OpenAI",
            api_key_encrypted="aa:bb:cc",
        )
        db_session.execute.return_value = scalar_result([row])

        records = await SQLCredentialStore(session_factory, ENCRYPTION_KEY).list_for_owner(owner_id)

        assert [(r.id, r.service) for r in records] == [(row.id, "OpenAI")]

    async def test_decrypt(self, session_factory) -> None:
        credential = CredentialRecord(
            id=uuid4(),
            owner_id=uuid4(),
            service="openai",
            api_key_encrypted=encrypt_api_key("sk-live", ENCRYPTION_KEY),
        )

        store = SQLCredentialStore(session_factory, ENCRYPTION_KEY)

        assert await store.decrypt(credential) == "sk-live"

    async def test_decrypt_failure_is_invalid_credential(self, session_factory) -> None:
        credential = CredentialRecord(
            id=uuid4(),
            owner_id=uuid4(),
            service="openai",
            api_key_encrypted=encrypt_api_key("sk-live", "x" * 32),
        )

        with pytest.raises(InvalidCredentialError):
            await SQLCredentialStore(session_factory, ENCRYPTION_KEY).decrypt(credential)


@pytest.mark.unit
class TestConversationStore:
    """Tests for ConversationStore."""

    async def test_create_new_conversation(self, session_factory, db_session) -> None:
        agent_id, owner_id = uuid4(), uuid4()

        record = await ConversationStore(session_factory).load_or_create(
            agent_id, owner_id, title="Hello"
        )

        assert record.agent_id == agent_id
        assert record.owner_id == owner_id
        assert record.title == "Hello"
        db_session.add.assert_called_once()
        db_session.commit.assert_awaited_once()

    async def test_load_existing(self, session_factory, db_session) -> None:
        conversation = _conversation(message_count=3)
        db_session.execute.return_value = scalar_result(conversation)

        record = await ConversationStore(session_factory).load_or_create(
            conversation.agent_id, conversation.owner_id, conversation_id=conversation.id
        )

        assert record.id == conversation.id
        assert record.message_count == 3
        db_session.commit.assert_not_awaited()

    async def test_load_foreign_conversation(self, session_factory, db_session) -> None:
        db_session.execute.return_value = scalar_result(None)

        with pytest.raises(ConversationNotFoundError):
            await ConversationStore(session_factory).load_or_create(
                uuid4(), uuid4(), conversation_id=uuid4()
            )

    async def test_append_message_bumps_counters(self, session_factory, db_session) -> None:
        conversation = _conversation(message_count=2)
        db_session.execute.return_value = scalar_result(conversation)

        record = await ConversationStore(session_factory).append_message(
            conversation.id, MessageRole.ASSISTANT, "Hello, world", model="gpt-4o"
        )

        stored = db_session.add.call_args.args[0]
        assert isinstance(stored, MessageORM)
        assert stored.position == 2
        assert stored.model == "gpt-4o"
        assert conversation.message_count == 3
        assert conversation.last_message_at is not None
        assert record.role == "assistant"
        assert record.content == "Hello, world"
        db_session.commit.assert_awaited_once()

    async def test_append_system_message_rejected(self, session_factory, db_session) -> None:
        with pytest.raises(ValueError):
            await ConversationStore(session_factory).append_message(
                uuid4(), MessageRole.SYSTEM, "You are..."
            )

        db_session.execute.assert_not_awaited()

    async def test_append_to_missing_conversation(self, session_factory, db_session) -> None:
        db_session.execute.return_value = scalar_result(None)

        with pytest.raises(ConversationNotFoundError):
            await ConversationStore(session_factory).append_message(
                uuid4(), MessageRole.USER, "hi"
            )

    async def test_list_messages(self, session_factory, db_session) -> None:
        conversation_id = uuid4()
        rows = [
            MessageORM(
                id=uuid4(),
                conversation_id=conversation_id,
                role=role,
                content=content,
                position=i,
                created_at=datetime.now(timezone.utc),
            )
            for i, (role, content) in enumerate([("user", "hi"), ("assistant", "hello")])
        ]
        db_session.execute.return_value = scalar_result(rows)

        messages = await ConversationStore(session_factory).list_messages(conversation_id)

        assert [(m.role, m.content) for m in messages] == [("user", "hi"), ("assistant", "hello")]

    async def test_list_messages_orders_by_position_only(self, session_factory, db_session) -> None:
        db_session.execute.return_value = scalar_result([])

        await ConversationStore(session_factory).list_messages(uuid4())

        sql = str(db_session.execute.call_args.args[0])
        order_by = sql.split("ORDER BY", 1)[1]
        assert order_by.strip() == "message.position"
