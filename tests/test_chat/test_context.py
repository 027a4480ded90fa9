"""Unit tests for ContextAssembler."""

from datetime import datetime, timezone
from uuid import uuid4

import pytest

from agent_chat.chat.context import ContextAssembler
from agent_chat.chat.errors import MessageIntegrityError
from agent_chat.models.chat_models import AgentRecord, MessageRecord
from tests.test_chat.fakes import OWNER_ID


def _agent(system_prompt=None) -> AgentRecord:
    return AgentRecord(
        id=uuid4(), owner_id=OWNER_ID, name="Helper", model="gpt-4o", system_prompt=system_prompt
    )


def _message(role: str, content: str) -> MessageRecord:
    return MessageRecord(
        id=uuid4(),
        conversation_id=uuid4(),
        role=role,
        content=content,
        created_at=datetime.now(timezone.utc),
    )


class TestContextAssembler:
    """Tests for building the provider context."""

    def test_system_prompt_leads_context(self) -> None:
        prior = [_message("user", "hi"), _message("assistant", "hello")]

        context = ContextAssembler().build(_agent("Be brief."), prior, "how are you?")

        assert [(m.role, m.content) for m in context] == [
            ("system", "Be brief."),
            ("user", "hi"),
            ("assistant", "hello"),
            ("user", "how are you?"),
        ]

    @pytest.mark.parametrize("prompt", [None, "", "   \n"])
    def test_blank_system_prompt_is_omitted(self, prompt) -> None:
        context = ContextAssembler().build(_agent(prompt), [], "hi")

        assert [(m.role, m.content) for m in context] == [("user", "hi")]

    def test_prior_order_is_preserved(self) -> None:
        prior = [_message("user" if i % 2 == 0 else "assistant", str(i)) for i in range(6)]

        context = ContextAssembler().build(_agent(), prior, "next")

        assert [m.content for m in context] == ["0", "1", "2", "3", "4", "5", "next"]

    def test_invalid_stored_role_raises(self) -> None:
        bad = _message("tool", "{}")

        with pytest.raises(MessageIntegrityError) as exc_info:
            ContextAssembler().build(_agent(), [_message("user", "hi"), bad], "next")

        assert exc_info.value.role == "tool"
        assert exc_info.value.message_id == bad.id
