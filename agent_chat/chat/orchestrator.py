"""Chat turn orchestration: resolve, stream, and persist one exchange.

One call to ``StreamOrchestrator.handle`` drives a ``ChatTurn`` through

    IDLE -> RESOLVING -> STREAMING -> COMPLETING -> DONE

with ERROR_TERMINAL reachable from every non-terminal state. Everything that
can fail with a status code happens before STREAMING; once the streaming
response is returned the status is fixed at 200 and failures only end the
body early.
"""

import asyncio
import enum
import logging
import uuid as uuid_mod
from typing import AsyncIterator, Awaitable, Callable, Optional
from uuid import UUID

from fastapi.responses import JSONResponse
from starlette.responses import Response, StreamingResponse

from agent_chat.chat.adapters.base import ChatCompletionRequest, ProviderStream
from agent_chat.chat.adapters.registry import AdapterRegistry
from agent_chat.chat.context import ContextAssembler
from agent_chat.chat.credential_resolver import (
    Found,
    ProviderMatch,
    resolve_credential,
)
from agent_chat.chat.error_classifier import classify_error
from agent_chat.chat.errors import (
    AgentNotFoundError,
    ChatError,
    ConversationNotFoundError,
    MessageRequiredError,
    NoCredentialsError,
)
from agent_chat.chat.interfaces import (
    AgentStore,
    AuthContext,
    ConversationStoreProtocol,
    CredentialStore,
)
from agent_chat.chat.providers import canonical_provider
from agent_chat.models.chat_models import AgentRecord, MessageRole
from agent_chat.settings import Settings

logger = logging.getLogger(__name__)

CONVERSATION_ID_HEADER = "X-Conversation-Id"
STREAM_MEDIA_TYPE = "text/plain; charset=utf-8"

# Maximum first-message characters used to auto-generate a conversation title
_TITLE_MAX_LENGTH: int = 80

DisconnectProbe = Callable[[], Awaitable[bool]]

# Close tasks still running after their request task was cancelled.
_pending_closes: set[asyncio.Task] = set()


class ChatTurnState(str, enum.Enum):
    """Lifecycle of one chat request."""

    IDLE = "idle"
    RESOLVING = "resolving"
    STREAMING = "streaming"
    COMPLETING = "completing"
    DONE = "done"
    ERROR_TERMINAL = "error_terminal"


_TRANSITIONS: dict[ChatTurnState, frozenset[ChatTurnState]] = {
    ChatTurnState.IDLE: frozenset({ChatTurnState.RESOLVING, ChatTurnState.ERROR_TERMINAL}),
    ChatTurnState.RESOLVING: frozenset({ChatTurnState.STREAMING, ChatTurnState.ERROR_TERMINAL}),
    ChatTurnState.STREAMING: frozenset({ChatTurnState.COMPLETING, ChatTurnState.ERROR_TERMINAL}),
    ChatTurnState.COMPLETING: frozenset({ChatTurnState.DONE, ChatTurnState.ERROR_TERMINAL}),
    ChatTurnState.DONE: frozenset(),
    ChatTurnState.ERROR_TERMINAL: frozenset(),
}


class InvalidTransitionError(Exception):
    """Raised when a chat turn is moved along an edge the lifecycle does not allow."""

    def __init__(self, current: ChatTurnState, target: ChatTurnState) -> None:
        super().__init__(f"Invalid chat turn transition {current.value} -> {target.value}")
        self.current = current
        self.target = target


class ChatTurn:
    """State holder for one chat request.

    Every transition is validated and logged as ``chat_turn_transition``;
    ``history`` keeps the visited states in order.
    """

    def __init__(self, request_id: str, agent_id: Optional[str] = None) -> None:
        self.request_id = request_id
        self.agent_id = agent_id
        self.state = ChatTurnState.IDLE
        self.history: list[ChatTurnState] = [ChatTurnState.IDLE]
        self.conversation_id: Optional[UUID] = None
        self.error_code: Optional[str] = None
        self.truncated = False

    @property
    def is_terminal(self) -> bool:
        return not _TRANSITIONS[self.state]

    def transition(self, target: ChatTurnState) -> None:
        """Move to ``target``.

        Raises:
            InvalidTransitionError: If the edge is not part of the lifecycle.
        """
        if target not in _TRANSITIONS[self.state]:
            raise InvalidTransitionError(self.state, target)
        logger.info(
            "chat_turn_transition: request_id=%s, agent_id=%s, conversation_id=%s, from=%s, to=%s",
            self.request_id,
            self.agent_id,
            self.conversation_id,
            self.state.value,
            target.value,
        )
        self.state = target
        self.history.append(target)

    def fail(self, exc: BaseException) -> None:
        """Move to ERROR_TERMINAL, recording the failure code. No-op once terminal."""
        if self.is_terminal:
            return
        self.error_code = exc.code if isinstance(exc, ChatError) else "internal_error"
        self.transition(ChatTurnState.ERROR_TERMINAL)


def _generate_title(message: str) -> str:
    """Generate a conversation title from the first user message.

    Truncates at the first sentence boundary within _TITLE_MAX_LENGTH characters,
    or hard-truncates with an ellipsis if no boundary is found.
    """
    clean: str = message.strip()
    if len(clean) <= _TITLE_MAX_LENGTH:
        return clean

    for sep in (".", "?", "!", "\n"):
        idx: int = clean.find(sep, 0, _TITLE_MAX_LENGTH)
        if idx > 0:
            return clean[: idx + 1]

    return clean[: _TITLE_MAX_LENGTH - 3] + "..."


def _parse_uuid(value: object, error: ChatError) -> UUID:
    if isinstance(value, UUID):
        return value
    try:
        return UUID(str(value))
    except ValueError as exc:
        raise error from exc


async def _close_shielded(stream: ProviderStream) -> None:
    """Close the provider stream so that cancellation cannot interrupt completion."""
    task = asyncio.ensure_future(stream.aclose())
    _pending_closes.add(task)
    task.add_done_callback(_pending_closes.discard)
    await asyncio.shield(task)


class StreamOrchestrator:
    """Drive one chat request from validation to persisted assistant reply.

    Provider-agnostic: the adapter is looked up from the canonical provider of
    the agent's model, and every adapter exposes the same stream contract.

    Args:
        agent_store: Read access to agents.
        credential_store: Listing and decryption of API connections.
        conversation_store: Conversation and message persistence.
        adapters: Registry of provider adapters.
        settings: Application settings.
        context_assembler: Builds the provider context (default instance if omitted).
    """

    def __init__(
        self,
        agent_store: AgentStore,
        credential_store: CredentialStore,
        conversation_store: ConversationStoreProtocol,
        adapters: AdapterRegistry,
        settings: Settings,
        context_assembler: Optional[ContextAssembler] = None,
    ) -> None:
        self._agents = agent_store
        self._credentials = credential_store
        self._conversations = conversation_store
        self._adapters = adapters
        self._settings = settings
        self._context = context_assembler or ContextAssembler()

    async def handle(
        self,
        auth: AuthContext,
        agent_id: object,
        message: Optional[str],
        conversation_id: Optional[object] = None,
        is_disconnected: Optional[DisconnectProbe] = None,
        request_id: Optional[str] = None,
        turn: Optional[ChatTurn] = None,
    ) -> Response:
        """Handle one chat request.

        Args:
            auth: Caller identity for this request.
            agent_id: Agent id from the path.
            message: User message text.
            conversation_id: Existing conversation to continue, if any.
            is_disconnected: Probe polled after each forwarded chunk.
            request_id: Correlation id for logs and error bodies.
            turn: Turn to drive; a new one is created when omitted.

        Returns:
            StreamingResponse (200, ``X-Conversation-Id``) on success, or a
            JSON error response for any failure before streaming began.
        """
        if turn is None:
            turn = ChatTurn(request_id=request_id or str(uuid_mod.uuid4()), agent_id=str(agent_id))
        request_id = turn.request_id

        try:
            stream = await self._open(turn, auth, agent_id, message, conversation_id)
        except ChatError as exc:
            turn.fail(exc)
            return self._error_response(turn, exc)
        except Exception as exc:
            turn.fail(exc)
            logger.exception(
                "chat_unexpected_error: request_id=%s, agent_id=%s, state=%s",
                request_id,
                agent_id,
                turn.state.value,
            )
            raise

        turn.transition(ChatTurnState.STREAMING)
        return StreamingResponse(
            self._forward(turn, stream, is_disconnected),
            media_type=STREAM_MEDIA_TYPE,
            headers={CONVERSATION_ID_HEADER: str(turn.conversation_id)},
        )

    # ------------------------------------------------------------------
    # Resolution (everything before the commit point)
    # ------------------------------------------------------------------

    async def _open(
        self,
        turn: ChatTurn,
        auth: AuthContext,
        agent_id: object,
        message: Optional[str],
        conversation_id: Optional[object],
    ) -> ProviderStream:
        owner_id = await auth.resolve_caller_id()

        text = message if isinstance(message, str) else ""
        if not text.strip():
            raise MessageRequiredError()

        turn.transition(ChatTurnState.RESOLVING)

        agent_uuid = _parse_uuid(agent_id, AgentNotFoundError())
        agent = await self._agents.get(agent_uuid, owner_id)
        if agent is None:
            raise AgentNotFoundError()

        model = agent.model or self._settings.default_model
        provider = canonical_provider(model)
        match = await self._resolve_provider(agent, provider.value, owner_id, turn)
        adapter = self._adapters.get(provider)
        api_key = await self._credentials.decrypt(match.credential)

        existing_id: Optional[UUID] = None
        if conversation_id not in (None, ""):
            existing_id = _parse_uuid(conversation_id, ConversationNotFoundError())
        conversation = await self._conversations.load_or_create(
            agent_id=agent.id,
            owner_id=owner_id,
            conversation_id=existing_id,
            title=None if existing_id else _generate_title(text),
        )
        turn.conversation_id = conversation.id

        prior = await self._conversations.list_messages(conversation.id)
        context = self._context.build(agent, prior, text)
        await self._conversations.append_message(conversation.id, MessageRole.USER, text)

        request = ChatCompletionRequest(
            messages=context,
            model=model,
            temperature=agent.temperature,
            max_tokens=agent.max_tokens,
        )

        async def on_complete(full_text: str) -> None:
            await self._complete(turn, conversation.id, full_text, model)

        logger.info(
            "chat_stream_requested: request_id=%s, agent_id=%s, conversation_id=%s, "
            "provider=%s, model=%s, context_messages=%d",
            turn.request_id,
            agent.id,
            conversation.id,
            match.provider,
            model,
            len(context),
        )
        return await adapter.stream(request, api_key, on_complete)

    async def _resolve_provider(
        self, agent: AgentRecord, provider: str, owner_id: UUID, turn: ChatTurn
    ) -> ProviderMatch:
        credentials = await self._credentials.list_for_owner(owner_id)
        result = resolve_credential(
            credentials,
            provider,
            allow_fallback=self._settings.credential_fallback_enabled,
        )
        if not isinstance(result, Found):
            logger.warning(
                "chat_no_credentials: request_id=%s, agent_id=%s, provider=%s, reason=%s",
                turn.request_id,
                agent.id,
                provider,
                result.reason,
            )
            raise NoCredentialsError(provider, reason=result.reason)

        logger.info(
            "chat_credential_resolved: request_id=%s, provider=%s, credential_id=%s, step=%s",
            turn.request_id,
            provider,
            result.credential.id,
            result.step.value,
        )
        return ProviderMatch(credential=result.credential, provider=provider, step=result.step)

    def _error_response(self, turn: ChatTurn, exc: ChatError) -> JSONResponse:
        outcome = classify_error(exc)
        logger.warning(
            "chat_request_failed: request_id=%s, agent_id=%s, status=%d, code=%s, detail=%s",
            turn.request_id,
            turn.agent_id,
            outcome.status_code,
            outcome.code,
            exc.message,
        )
        headers = None
        if turn.conversation_id is not None:
            headers = {CONVERSATION_ID_HEADER: str(turn.conversation_id)}
        return outcome.to_response(request_id=turn.request_id, headers=headers)

    # ------------------------------------------------------------------
    # Streaming and completion (after the commit point)
    # ------------------------------------------------------------------

    async def _forward(
        self,
        turn: ChatTurn,
        stream: ProviderStream,
        is_disconnected: Optional[DisconnectProbe],
    ) -> AsyncIterator[bytes]:
        """Forward chunks to the client; failures end the body, never raise."""
        try:
            async for chunk in stream:
                yield chunk
                if is_disconnected is not None and await is_disconnected():
                    turn.truncated = True
                    logger.info(
                        "chat_client_disconnected: request_id=%s, conversation_id=%s, chars_sent=%d",
                        turn.request_id,
                        turn.conversation_id,
                        len(stream.text),
                    )
                    break
        except ChatError as exc:
            logger.warning(
                "chat_stream_failed: request_id=%s, conversation_id=%s, code=%s, chars_sent=%d",
                turn.request_id,
                turn.conversation_id,
                exc.code,
                len(stream.text),
            )
            turn.fail(exc)
        except Exception as exc:
            logger.exception(
                "chat_stream_error: request_id=%s, conversation_id=%s, chars_sent=%d",
                turn.request_id,
                turn.conversation_id,
                len(stream.text),
            )
            turn.fail(exc)
        finally:
            await _close_shielded(stream)

    async def _complete(
        self, turn: ChatTurn, conversation_id: UUID, full_text: str, model: str
    ) -> None:
        """Persist the assistant reply; failures are logged and never reach the client."""
        if turn.state is ChatTurnState.STREAMING:
            turn.transition(ChatTurnState.COMPLETING)

        if not full_text:
            logger.info(
                "chat_assistant_empty: request_id=%s, conversation_id=%s, state=%s",
                turn.request_id,
                conversation_id,
                turn.state.value,
            )
            if turn.state is ChatTurnState.COMPLETING:
                turn.transition(ChatTurnState.DONE)
            return

        try:
            await self._conversations.append_message(
                conversation_id, MessageRole.ASSISTANT, full_text, model=model
            )
        except Exception:
            logger.exception(
                "chat_assistant_persist_failed: request_id=%s, conversation_id=%s, chars=%d",
                turn.request_id,
                conversation_id,
                len(full_text),
            )
            if turn.state is ChatTurnState.COMPLETING:
                turn.transition(ChatTurnState.ERROR_TERMINAL)
            return

        logger.info(
            "chat_assistant_persisted: request_id=%s, conversation_id=%s, chars=%d, "
            "truncated=%s, state=%s",
            turn.request_id,
            conversation_id,
            len(full_text),
            turn.truncated,
            turn.state.value,
        )
        if turn.state is ChatTurnState.COMPLETING:
            turn.transition(ChatTurnState.DONE)
