"""Abstract provider adapter and the uniform text stream it returns."""

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, AsyncIterator, Awaitable, Callable

import httpx

from agent_chat.chat.errors import ProviderError, UpstreamUnknownError
from agent_chat.chat.providers import ProviderName
from agent_chat.models.chat_models import ChatMessage

logger = logging.getLogger(__name__)

OnComplete = Callable[[str], Awaitable[None]]

# Raised by the SDK stream iterators themselves while reading the body.
_READ_ERRORS: tuple[type[Exception], ...] = (httpx.HTTPError, json.JSONDecodeError)


@dataclass(frozen=True)
class ChatCompletionRequest:
    """Provider-neutral request built by the orchestrator."""

    messages: list[ChatMessage]
    model: str
    temperature: float = 0.7
    max_tokens: int = 1024


class ProviderStream:
    """Async iterator of UTF-8 text bytes from one upstream response.

    Only extracted text is yielded, never provider framing. The full text is
    accumulated as chunks pass through, and ``on_complete`` fires exactly
    once with it: when the upstream is exhausted (on the ``__anext__`` call
    after the last chunk was handed out), or from ``aclose()`` when the
    consumer stops early or iteration failed.
    """

    def __init__(
        self,
        upstream: Any,
        adapter: "ProviderAdapter",
        on_complete: OnComplete,
        model: str,
    ) -> None:
        self._upstream = upstream
        self._adapter = adapter
        self._on_complete = on_complete
        self._model = model
        self._chunks: list[str] = []
        self._completed = False
        self._closed = False
        self._iterator = self._iterate()

    @property
    def text(self) -> str:
        """Text accumulated so far."""
        return "".join(self._chunks)

    def __aiter__(self) -> "ProviderStream":
        return self

    async def __anext__(self) -> bytes:
        if self._closed:
            raise StopAsyncIteration
        try:
            return await self._iterator.__anext__()
        except StopAsyncIteration:
            await self._complete()
            raise

    async def __aenter__(self) -> "ProviderStream":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Stop reading upstream, release the connection, and fire completion."""
        if not self._closed:
            self._closed = True
            await self._iterator.aclose()
            await self._upstream.close()
        await self._complete()

    async def _iterate(self) -> AsyncIterator[bytes]:
        try:
            async for text in self._adapter.iter_text(self._upstream):
                if text:
                    self._chunks.append(text)
                    yield text.encode("utf-8")
        except self._adapter.api_errors + _READ_ERRORS as exc:
            failure = self._adapter.translate_error(exc, self._model)
            logger.error(
                "provider_stream_read_error: provider=%s, model=%s, code=%s, error=%s",
                self._adapter.provider.value,
                self._model,
                failure.code,
                str(exc),
            )
            raise failure from exc
        finally:
            await self._upstream.close()

    async def _complete(self) -> None:
        if self._completed:
            return
        self._completed = True
        await self._on_complete(self.text)


class ProviderAdapter(ABC):
    """Base class for upstream chat providers.

    Subclasses open the request through the provider SDK, pull text out of
    its stream events, and map SDK exceptions to typed failures. Error
    handling and the completion contract are shared here, so every provider
    exposes the same outward behaviour.
    """

    provider: ProviderName

    # SDK exception base classes this adapter knows how to classify.
    api_errors: tuple[type[Exception], ...] = ()

    def __init__(self, client: httpx.AsyncClient, base_url: str) -> None:
        """Initialize adapter with a shared HTTP client.

        Args:
            client: Shared async HTTP client handed to the SDK (owns timeouts
                and pooling; never closed by the adapter).
            base_url: Provider API base URL.
        """
        self._client = client
        self._base_url = base_url.rstrip("/")

    @abstractmethod
    async def open_upstream(self, request: ChatCompletionRequest, api_key: str) -> Any:
        """Send the streaming request and return the SDK stream.

        The returned object must be async-iterable and expose ``close()``.
        SDK exceptions propagate unchanged.
        """
        ...

    @abstractmethod
    def iter_text(self, upstream: Any) -> AsyncIterator[str]:
        """Yield the text carried by each upstream stream event."""
        ...

    @abstractmethod
    def classify_failure(self, exc: Exception, model: str) -> ProviderError:
        """Map one of ``api_errors`` to a typed failure."""
        ...

    def translate_error(self, exc: Exception, model: str) -> ProviderError:
        """Map any upstream exception to a typed failure."""
        if isinstance(exc, self.api_errors):
            return self.classify_failure(exc, model)
        return UpstreamUnknownError(
            f"Stream read failed: {exc}", provider=self.provider.value
        )

    async def stream(
        self,
        request: ChatCompletionRequest,
        api_key: str,
        on_complete: OnComplete,
    ) -> ProviderStream:
        """Open a streaming completion.

        Args:
            request: Provider-neutral chat request.
            api_key: Decrypted provider secret.
            on_complete: Called once with the full accumulated text.

        Returns:
            ProviderStream positioned before the first chunk.

        Raises:
            ProviderError: If the upstream rejects the request or is unreachable.
        """
        provider = self.provider.value
        try:
            upstream = await self.open_upstream(request, api_key)
        except self.api_errors + _READ_ERRORS as exc:
            failure = self.translate_error(exc, request.model)
            logger.warning(
                "provider_request_rejected: provider=%s, model=%s, status=%s, code=%s, error=%s",
                provider,
                request.model,
                getattr(exc, "status_code", None),
                failure.code,
                str(exc),
            )
            raise failure from exc

        logger.info(
            "provider_stream_opened: provider=%s, model=%s, messages=%d",
            provider,
            request.model,
            len(request.messages),
        )
        return ProviderStream(upstream, self, on_complete, request.model)
