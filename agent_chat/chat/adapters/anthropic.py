"""Anthropic Messages API adapter built on the ``anthropic`` SDK."""

import logging
from typing import Any, AsyncIterator

import anthropic
import httpx
from anthropic import AsyncAnthropic

from agent_chat.chat.adapters.base import ChatCompletionRequest, ProviderAdapter
from agent_chat.chat.errors import (
    InvalidCredentialError,
    ModelUnavailableError,
    ProviderError,
    RateLimitedError,
    UpstreamUnknownError,
)
from agent_chat.chat.providers import ProviderName

logger = logging.getLogger(__name__)

# Full model ids with version suffixes accepted by the API.
VALID_ANTHROPIC_MODELS: tuple[str, ...] = (
    "claude-3-7-sonnet-20250219",
    "claude-3-7-sonnet-thinking-20250219",
    "claude-3-5-sonnet-20240620",
    "claude-3-opus-20240229",
    "claude-3-sonnet-20240229",
    "claude-3-haiku-20240307",
)

# Short names users pick in the dashboard.
MODEL_ALIASES: dict[str, str] = {
    "claude-3.7-sonnet": "claude-3-7-sonnet-20250219",
    "claude-3.7-sonnet-thinking": "claude-3-7-sonnet-thinking-20250219",
    "claude-3.5-sonnet": "claude-3-5-sonnet-20240620",
    "claude-3-7-sonnet": "claude-3-7-sonnet-20250219",
    "claude-3-7-sonnet-thinking": "claude-3-7-sonnet-thinking-20250219",
    "claude-3-5-sonnet": "claude-3-5-sonnet-20240620",
    "claude-3-opus": "claude-3-opus-20240229",
    "claude-3-sonnet": "claude-3-sonnet-20240229",
    "claude-3-haiku": "claude-3-haiku-20240307",
}

_MAX_TEMPERATURE = 1.0

_INVALID_KEY_TYPES = frozenset({"authentication_error", "permission_error"})
_RATE_LIMIT_TYPES = frozenset({"rate_limit_error", "overloaded_error"})
_MODEL_TYPES = frozenset({"not_found_error"})


def normalize_model(model: str) -> str:
    """Resolve a short or partial model name to a full Anthropic model id.

    Unknown names pass through unchanged so the API can reject them.
    """
    if model in VALID_ANTHROPIC_MODELS:
        return model
    if model in MODEL_ALIASES:
        return MODEL_ALIASES[model]
    for valid in VALID_ANTHROPIC_MODELS:
        if valid.startswith(model):
            return valid
    return model


class AnthropicAdapter(ProviderAdapter):
    """Streams ``messages.create(stream=True)`` and re-emits ``text_delta`` text."""

    provider = ProviderName.ANTHROPIC
    api_errors = (anthropic.APIError,)

    def __init__(
        self, client: httpx.AsyncClient, base_url: str, api_version: str = "2023-06-01"
    ) -> None:
        super().__init__(client, base_url)
        self._api_version = api_version

    def _sdk(self, api_key: str) -> AsyncAnthropic:
        return AsyncAnthropic(
            api_key=api_key,
            base_url=self._base_url,
            http_client=self._client,
            max_retries=0,
            default_headers={"anthropic-version": self._api_version},
        )

    def build_payload(self, request: ChatCompletionRequest) -> dict[str, Any]:
        """Build the Messages API arguments.

        System entries move to the top-level ``system`` field, and consecutive
        turns with the same role are merged since the API expects
        user/assistant alternation.
        """
        system_parts: list[str] = []
        turns: list[dict[str, str]] = []

        for message in request.messages:
            if message.role == "system":
                system_parts.append(message.content)
                continue
            if turns and turns[-1]["role"] == message.role:
                turns[-1]["content"] = f"{turns[-1]['content']}\n\n{message.content}"
                continue
            turns.append({"role": message.role, "content": message.content})

        model = normalize_model(request.model)
        if model != request.model:
            logger.debug("anthropic_model_normalized: requested=%s, resolved=%s", request.model, model)

        payload: dict[str, Any] = {
            "model": model,
            "messages": turns,
            "max_tokens": request.max_tokens,
            "temperature": min(request.temperature, _MAX_TEMPERATURE),
        }
        if system_parts:
            payload["system"] = "\n\n".join(system_parts)
        return payload

    async def open_upstream(self, request: ChatCompletionRequest, api_key: str):
        return await self._sdk(api_key).messages.create(**self.build_payload(request), stream=True)

    async def iter_text(self, upstream) -> AsyncIterator[str]:
        async for event in upstream:
            if event.type == "message_stop":
                break
            if event.type == "content_block_delta" and event.delta.type == "text_delta":
                yield event.delta.text

    def classify_failure(self, exc: Exception, model: str) -> ProviderError:
        """Map an Anthropic SDK error to a typed failure.

        Error bodies look like ``{"type": "error", "error": {"type", "message"}}``.
        Errors sent inside the stream surface as ``APIStatusError`` with the
        200 status of the stream, so the body's error type is checked too.
        An overloaded upstream (529) is treated like throttling.
        """
        provider = self.provider.value
        if isinstance(exc, anthropic.APITimeoutError):
            return UpstreamUnknownError("Provider request timed out", provider=provider)
        if isinstance(exc, anthropic.APIConnectionError):
            return UpstreamUnknownError(f"Provider request failed: {exc}", provider=provider)

        body = getattr(exc, "body", None)
        error = body.get("error", body) if isinstance(body, dict) else {}
        if not isinstance(error, dict):
            error = {}
        error_type = str(error.get("type") or "")
        message = str(error.get("message") or getattr(exc, "message", None) or exc)
        status_code = getattr(exc, "status_code", None)

        if isinstance(exc, (anthropic.AuthenticationError, anthropic.PermissionDeniedError)):
            return InvalidCredentialError(message, provider=provider)
        if error_type in _INVALID_KEY_TYPES:
            return InvalidCredentialError(message, provider=provider)
        if (
            isinstance(exc, anthropic.RateLimitError)
            or status_code == 529
            or error_type in _RATE_LIMIT_TYPES
        ):
            return RateLimitedError(message, provider=provider)
        if isinstance(exc, anthropic.NotFoundError) or error_type in _MODEL_TYPES:
            return ModelUnavailableError(message, provider=provider, model=normalize_model(model))
        return UpstreamUnknownError(message, provider=provider)
