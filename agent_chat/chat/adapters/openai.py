"""OpenAI chat completions adapter built on the ``openai`` SDK."""

import logging
from typing import AsyncIterator

import openai
from openai import AsyncOpenAI
from openai.types.chat import ChatCompletionChunk

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

_INVALID_KEY_CODES = frozenset({"invalid_api_key", "invalid_authentication"})
_RATE_LIMIT_CODES = frozenset({"rate_limit_exceeded", "insufficient_quota"})
_MODEL_CODES = frozenset({"model_not_found"})


class OpenAIAdapter(ProviderAdapter):
    """Streams ``chat.completions.create(stream=True)`` and re-emits ``delta.content``."""

    provider = ProviderName.OPENAI
    api_errors = (openai.APIError,)

    def _sdk(self, api_key: str) -> AsyncOpenAI:
        return AsyncOpenAI(
            api_key=api_key,
            base_url=self._base_url,
            http_client=self._client,
            max_retries=0,
        )

    async def open_upstream(self, request: ChatCompletionRequest, api_key: str):
        return await self._sdk(api_key).chat.completions.create(
            model=request.model,
            messages=[{"role": m.role, "content": m.content} for m in request.messages],
            temperature=request.temperature,
            max_tokens=request.max_tokens,
            stream=True,
        )

    async def iter_text(self, upstream) -> AsyncIterator[str]:
        chunk: ChatCompletionChunk
        async for chunk in upstream:
            if not chunk.choices:
                continue
            content = chunk.choices[0].delta.content
            if content:
                yield content

    def classify_failure(self, exc: Exception, model: str) -> ProviderError:
        """Map an OpenAI SDK error to a typed failure.

        Both the exception type and the ``code``/``type`` markers from the
        error body are checked, because errors sent inside the stream arrive
        as a plain ``APIError`` without a status.
        """
        provider = self.provider.value
        if isinstance(exc, openai.APITimeoutError):
            return UpstreamUnknownError("Provider request timed out", provider=provider)
        if isinstance(exc, openai.APIConnectionError):
            return UpstreamUnknownError(f"Provider request failed: {exc}", provider=provider)

        markers = {str(getattr(exc, "code", None) or ""), str(getattr(exc, "type", None) or "")}
        message = getattr(exc, "message", None) or str(exc)

        if isinstance(exc, (openai.AuthenticationError, openai.PermissionDeniedError)):
            return InvalidCredentialError(message, provider=provider)
        if markers & _INVALID_KEY_CODES:
            return InvalidCredentialError(message, provider=provider)
        if isinstance(exc, openai.RateLimitError) or markers & _RATE_LIMIT_CODES:
            return RateLimitedError(message, provider=provider)
        if isinstance(exc, openai.NotFoundError) or markers & _MODEL_CODES:
            return ModelUnavailableError(message, provider=provider, model=model)
        return UpstreamUnknownError(message, provider=provider)
