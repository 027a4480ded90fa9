"""Typed failures raised by the chat core.

Every failure the orchestrator can surface to a caller is a ``ChatError``
subclass with a stable ``code``. ``classify_error`` maps them to HTTP outcomes.
"""

from typing import Optional


class ChatError(Exception):
    """Base class for chat failures."""

    code: str = "chat_error"

    def __init__(self, message: str = "") -> None:
        super().__init__(message or self.code)
        self.message = message or self.code


class UnauthenticatedError(ChatError):
    """No authenticated caller could be resolved."""

    code = "unauthenticated"


class MessageRequiredError(ChatError):
    """The request carried no message text (missing, empty, or blank)."""

    code = "message_required"


class InvalidRequestBodyError(ChatError):
    """The request body was not parseable JSON."""

    code = "invalid_request_body"


class AgentNotFoundError(ChatError):
    """The agent does not exist or is not owned by the caller."""

    code = "agent_not_found"


class ConversationNotFoundError(ChatError):
    """The supplied conversation does not exist for this agent and caller."""

    code = "conversation_not_found"


class UnsupportedProviderError(ChatError):
    """No canonical provider can be derived from the agent's model name."""

    code = "unsupported_provider"

    def __init__(self, model: str) -> None:
        super().__init__(f"Unsupported model provider for model '{model}'")
        self.model = model


class NoCredentialsError(ChatError):
    """The caller has no usable API connection for the agent."""

    code = "no_credentials"

    def __init__(self, provider: str, reason: str = "empty") -> None:
        super().__init__(f"No API connections for provider '{provider}' (reason={reason})")
        self.provider = provider
        self.reason = reason


class MessageIntegrityError(ChatError):
    """A stored message has a role outside {system, user, assistant}."""

    code = "message_integrity"

    def __init__(self, message_id: object, role: str) -> None:
        super().__init__(f"Stored message {message_id} has invalid role '{role}'")
        self.message_id = message_id
        self.role = role


class ProviderError(ChatError):
    """Base class for classified upstream provider failures."""

    code = "provider_error"

    def __init__(self, message: str = "", provider: Optional[str] = None) -> None:
        super().__init__(message)
        self.provider = provider


class InvalidCredentialError(ProviderError):
    """The upstream rejected the API key, or the stored key could not be decrypted."""

    code = "invalid_credential"


class RateLimitedError(ProviderError):
    """The upstream throttled the request or the account is out of quota."""

    code = "rate_limited"


class ModelUnavailableError(ProviderError):
    """The upstream does not serve the requested model for this key."""

    code = "model_unavailable"

    def __init__(
        self, message: str = "", provider: Optional[str] = None, model: Optional[str] = None
    ) -> None:
        super().__init__(message, provider=provider)
        self.model = model


class UpstreamUnknownError(ProviderError):
    """Any upstream failure that does not fit a more specific bucket."""

    code = "upstream_unknown"
