"""Build the ordered message list sent to a provider for one chat turn."""

import logging
from typing import Sequence

from agent_chat.chat.errors import MessageIntegrityError
from agent_chat.models.chat_models import AgentRecord, ChatMessage, MessageRecord, MessageRole

logger = logging.getLogger(__name__)

_VALID_ROLES: frozenset[str] = frozenset(role.value for role in MessageRole)


class ContextAssembler:
    """Assemble ``[system?, *prior, user]`` for a provider request.

    The system entry is synthesized from the agent's ``system_prompt`` and is
    never written back to the conversation.
    """

    def build(
        self,
        agent: AgentRecord,
        prior_messages: Sequence[MessageRecord],
        new_user_text: str,
    ) -> list[ChatMessage]:
        """Build the provider context.

        Args:
            agent: Agent whose system prompt leads the context.
            prior_messages: Stored messages in conversation order.
            new_user_text: Text of the message being sent now.

        Returns:
            Ordered context ending with the new user message.

        Raises:
            MessageIntegrityError: If a stored message has an unknown role.
        """
        context: list[ChatMessage] = []

        if agent.system_prompt and agent.system_prompt.strip():
            context.append(ChatMessage(role="system", content=agent.system_prompt))

        for message in prior_messages:
            if message.role not in _VALID_ROLES:
                logger.error(
                    "context_invalid_role: message_id=%s, conversation_id=%s, role=%s",
                    message.id,
                    message.conversation_id,
                    message.role,
                )
                raise MessageIntegrityError(message.id, message.role)
            context.append(ChatMessage(role=message.role, content=message.content))

        context.append(ChatMessage(role="user", content=new_user_text))

        logger.debug(
            "context_built: agent_id=%s, prior=%d, total=%d",
            agent.id,
            len(prior_messages),
            len(context),
        )
        return context
