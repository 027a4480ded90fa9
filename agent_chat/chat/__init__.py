"""Agent chat orchestration core."""

from agent_chat.chat.context import ContextAssembler
from agent_chat.chat.credential_resolver import (
    Found,
    MatchStep,
    NoCredentials,
    ProviderMatch,
    resolve_credential,
)
from agent_chat.chat.error_classifier import ErrorOutcome, classify_error
from agent_chat.chat.orchestrator import (
    ChatTurn,
    ChatTurnState,
    InvalidTransitionError,
    StreamOrchestrator,
)
from agent_chat.chat.providers import ProviderName, canonical_provider

__all__ = [
    "ChatTurn",
    "ChatTurnState",
    "ContextAssembler",
    "ErrorOutcome",
    "Found",
    "InvalidTransitionError",
    "MatchStep",
    "NoCredentials",
    "ProviderMatch",
    "ProviderName",
    "StreamOrchestrator",
    "canonical_provider",
    "classify_error",
    "resolve_credential",
]
