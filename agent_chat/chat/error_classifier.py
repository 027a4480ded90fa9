"""Map chat failures to stable HTTP outcomes."""

import logging
from dataclasses import dataclass
from typing import Optional

from fastapi import status
from fastapi.responses import JSONResponse

from agent_chat.chat.errors import (
    AgentNotFoundError,
    ChatError,
    ConversationNotFoundError,
    InvalidCredentialError,
    InvalidRequestBodyError,
    MessageRequiredError,
    ModelUnavailableError,
    NoCredentialsError,
    RateLimitedError,
    UnauthenticatedError,
    UnsupportedProviderError,
)
from agent_chat.chat.providers import ProviderName

logger = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Unauthorized - You must be logged in to chat with an agent"
MESSAGE_REQUIRED_MESSAGE = "Message is required"
INVALID_BODY_MESSAGE = "Invalid request body - failed to parse JSON"
AGENT_NOT_FOUND_MESSAGE = "Agent not found"
CONVERSATION_NOT_FOUND_MESSAGE = "Conversation not found"
NO_CREDENTIALS_MESSAGE = "No API connections found for this agent"
INVALID_CREDENTIAL_MESSAGE = "Invalid API key. Please check your API connection settings."
RATE_LIMITED_MESSAGE = "Rate limit exceeded. Please wait a moment and try again."
MODEL_UNAVAILABLE_MESSAGE = "The selected model is not available."
GENERIC_FAILURE_MESSAGE = (
    "Failed to generate a response. Please try again or check your API connection."
)

_MODEL_HINTS: dict[str, str] = {
    ProviderName.OPENAI.value: "Check that your OpenAI account has access to this model.",
    ProviderName.ANTHROPIC.value: (
        "Use a full Anthropic model name such as claude-3-5-sonnet-20240620."
    ),
}


@dataclass(frozen=True)
class ErrorOutcome:
    """HTTP status, user-facing error text, and machine code for one failure."""

    status_code: int
    error: str
    code: str

    def to_response(
        self,
        request_id: Optional[str] = None,
        headers: Optional[dict[str, str]] = None,
    ) -> JSONResponse:
        """Render the outcome as the JSON error body ``{"error": ...}``."""
        content: dict[str, Optional[str]] = {"error": self.error, "code": self.code}
        if request_id:
            content["request_id"] = request_id
        return JSONResponse(status_code=self.status_code, content=content, headers=headers)


def classify_error(exc: BaseException) -> ErrorOutcome:
    """Map an exception to its HTTP outcome.

    Provider-specific details never reach the response body; anything that is
    not a known ``ChatError`` becomes the generic 500 outcome.

    Args:
        exc: Failure raised before the response was committed.

    Returns:
        ErrorOutcome with status code, error text, and stable code.
    """
    if isinstance(exc, UnauthenticatedError):
        return ErrorOutcome(status.HTTP_401_UNAUTHORIZED, UNAUTHORIZED_MESSAGE, exc.code)
    if isinstance(exc, MessageRequiredError):
        return ErrorOutcome(status.HTTP_400_BAD_REQUEST, MESSAGE_REQUIRED_MESSAGE, exc.code)
    if isinstance(exc, InvalidRequestBodyError):
        return ErrorOutcome(status.HTTP_400_BAD_REQUEST, INVALID_BODY_MESSAGE, exc.code)
    if isinstance(exc, AgentNotFoundError):
        return ErrorOutcome(status.HTTP_404_NOT_FOUND, AGENT_NOT_FOUND_MESSAGE, exc.code)
    if isinstance(exc, ConversationNotFoundError):
        return ErrorOutcome(status.HTTP_404_NOT_FOUND, CONVERSATION_NOT_FOUND_MESSAGE, exc.code)
    if isinstance(exc, UnsupportedProviderError):
        return ErrorOutcome(status.HTTP_400_BAD_REQUEST, exc.message, exc.code)
    if isinstance(exc, NoCredentialsError):
        return ErrorOutcome(status.HTTP_400_BAD_REQUEST, NO_CREDENTIALS_MESSAGE, exc.code)
    if isinstance(exc, InvalidCredentialError):
        return ErrorOutcome(status.HTTP_401_UNAUTHORIZED, INVALID_CREDENTIAL_MESSAGE, exc.code)
    if isinstance(exc, RateLimitedError):
        return ErrorOutcome(status.HTTP_429_TOO_MANY_REQUESTS, RATE_LIMITED_MESSAGE, exc.code)
    if isinstance(exc, ModelUnavailableError):
        hint = _MODEL_HINTS.get(exc.provider or "")
        text = f"{MODEL_UNAVAILABLE_MESSAGE} {hint}" if hint else MODEL_UNAVAILABLE_MESSAGE
        return ErrorOutcome(status.HTTP_400_BAD_REQUEST, text, exc.code)

    code = exc.code if isinstance(exc, ChatError) else "internal_error"
    logger.debug("classify_error_fallback: type=%s, code=%s", type(exc).__name__, code)
    return ErrorOutcome(status.HTTP_500_INTERNAL_SERVER_ERROR, GENERIC_FAILURE_MESSAGE, code)
