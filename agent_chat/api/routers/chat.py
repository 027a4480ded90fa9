"""Chat endpoint: stream an agent's reply as plain text."""

import json
import logging

from fastapi import APIRouter, Depends, Request, status
from pydantic import ValidationError
from starlette.responses import Response

from agent_chat.api.dependencies import get_auth_context, get_orchestrator
from agent_chat.api.schemas.chat import ChatRequest
from agent_chat.api.schemas.common import ErrorResponse
from agent_chat.chat.error_classifier import classify_error
from agent_chat.chat.errors import ChatError, InvalidRequestBodyError, MessageRequiredError
from agent_chat.chat.interfaces import AuthContext
from agent_chat.chat.orchestrator import StreamOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_chat_request(request: Request) -> ChatRequest:
    """Parse the JSON body after authentication has been checked.

    Raises:
        InvalidRequestBodyError: If the body is not a JSON object.
        MessageRequiredError: If ``message`` is not a string.
    """
    raw = await request.body()
    try:
        payload = json.loads(raw)
    except ValueError as e:
        raise InvalidRequestBodyError(str(e)) from e
    if not isinstance(payload, dict):
        raise InvalidRequestBodyError("Request body must be a JSON object")

    try:
        return ChatRequest.model_validate(payload)
    except ValidationError as e:
        if any("message" in err.get("loc", ()) for err in e.errors()):
            raise MessageRequiredError() from e
        raise InvalidRequestBodyError(str(e)) from e


@router.post(
    "/{agent_id}/chat",
    status_code=status.HTTP_200_OK,
    summary="Send a message to an agent and stream the reply",
    response_class=Response,
    responses={
        200: {
            "description": "Assistant reply as UTF-8 text; X-Conversation-Id header set",
            "content": {"text/plain": {}},
        },
        400: {"model": ErrorResponse, "description": "Invalid request or configuration"},
        401: {"model": ErrorResponse, "description": "Not authenticated or invalid API key"},
        404: {"model": ErrorResponse, "description": "Agent or conversation not found"},
        429: {"model": ErrorResponse, "description": "Provider rate limit"},
        500: {"model": ErrorResponse, "description": "Provider or internal failure"},
    },
)
async def chat(
    agent_id: str,
    request: Request,
    auth: AuthContext = Depends(get_auth_context),
    orchestrator: StreamOrchestrator = Depends(get_orchestrator),
) -> Response:
    """
    Send a message to an agent.

    The body is ``{"message": str, "conversationId"?: str}``. On success the
    response streams the assistant's text as it is generated; failures before
    streaming starts return ``{"error", "code", "request_id"}`` JSON.

    Args:
        agent_id: Agent UUID.
        request: FastAPI request (body, disconnect probe, request id).
        auth: Caller identity.
        orchestrator: Chat orchestrator.

    Returns:
        StreamingResponse or JSON error response.
    """
    request_id = getattr(request.state, "request_id", None)

    try:
        await auth.resolve_caller_id()
        body = await _read_chat_request(request)
    except ChatError as e:
        outcome = classify_error(e)
        logger.info(
            "chat_request_rejected: agent_id=%s, status=%d, code=%s, request_id=%s",
            agent_id,
            outcome.status_code,
            outcome.code,
            request_id,
        )
        return outcome.to_response(request_id=request_id)

    return await orchestrator.handle(
        auth=auth,
        agent_id=agent_id,
        message=body.message,
        conversation_id=body.conversation_id,
        is_disconnected=request.is_disconnected,
        request_id=request_id,
    )
