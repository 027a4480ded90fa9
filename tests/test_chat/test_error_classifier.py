"""Unit tests for mapping chat failures to HTTP outcomes."""

import json

import pytest

from agent_chat.chat.error_classifier import (
    GENERIC_FAILURE_MESSAGE,
    ErrorOutcome,
    classify_error,
)
from agent_chat.chat.errors import (
    AgentNotFoundError,
    ConversationNotFoundError,
    InvalidCredentialError,
    InvalidRequestBodyError,
    MessageIntegrityError,
    MessageRequiredError,
    ModelUnavailableError,
    NoCredentialsError,
    RateLimitedError,
    UnauthenticatedError,
    UnsupportedProviderError,
    UpstreamUnknownError,
)


class TestClassifyError:
    """Tests for classify_error()."""

    @pytest.mark.parametrize(
        ("exc", "status_code", "code"),
        [
            (UnauthenticatedError(), 401, "unauthenticated"),
            (MessageRequiredError(), 400, "message_required"),
            (InvalidRequestBodyError(), 400, "invalid_request_body"),
            (AgentNotFoundError(), 404, "agent_not_found"),
            (ConversationNotFoundError(), 404, "conversation_not_found"),
            (UnsupportedProviderError("llama-3"), 400, "unsupported_provider"),
            (NoCredentialsError("openai"), 400, "no_credentials"),
            (InvalidCredentialError("bad key", provider="openai"), 401, "invalid_credential"),
            (RateLimitedError("slow down", provider="anthropic"), 429, "rate_limited"),
            (ModelUnavailableError("nope", provider="openai"), 400, "model_unavailable"),
            (UpstreamUnknownError("boom", provider="openai"), 500, "upstream_unknown"),
            (MessageIntegrityError("id", "tool"), 500, "message_integrity"),
            (RuntimeError("unexpected"), 500, "internal_error"),
        ],
    )
    def test_status_and_code(self, exc: Exception, status_code: int, code: str) -> None:
        outcome = classify_error(exc)

        assert outcome.status_code == status_code
        assert outcome.code == code

    def test_messages(self) -> None:
        assert classify_error(UnauthenticatedError()).error == (
            "Unauthorized - You must be logged in to chat with an agent"
        )
        assert classify_error(MessageRequiredError()).error == "Message is required"
        assert classify_error(AgentNotFoundError()).error == "Agent not found"
        assert classify_error(NoCredentialsError("openai")).error == (
            "No API connections found for this agent"
        )

    def test_unsupported_provider_names_model(self) -> None:
        outcome = classify_error(UnsupportedProviderError("llama-3"))

        assert "llama-3" in outcome.error

    def test_model_unavailable_adds_provider_hint(self) -> None:
        outcome = classify_error(ModelUnavailableError("x", provider="anthropic"))

        assert outcome.error.startswith("The selected model is not available.")
        assert "claude-3-5-sonnet-20240620" in outcome.error

    def test_provider_details_never_leak(self) -> None:
        outcome = classify_error(UpstreamUnknownError("sk-secret upstream trace", provider="openai"))

        assert outcome.error == GENERIC_FAILURE_MESSAGE
        assert "sk-secret" not in outcome.error


class TestErrorOutcomeResponse:
    """Tests for ErrorOutcome.to_response()."""

    def test_body_and_headers(self) -> None:
        outcome = ErrorOutcome(404, "Agent not found", "agent_not_found")

        response = outcome.to_response(request_id="req-1", headers={"X-Conversation-Id": "c1"})

        assert response.status_code == 404
        assert json.loads(response.body) == {
            "error": "Agent not found",
            "code": "agent_not_found",
            "request_id": "req-1",
        }
        assert response.headers["X-Conversation-Id"] == "c1"

    def test_request_id_omitted_when_missing(self) -> None:
        response = ErrorOutcome(400, "Message is required", "message_required").to_response()

        assert "request_id" not in json.loads(response.body)
