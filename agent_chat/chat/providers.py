"""Canonical provider identity derived from an agent's model name."""

import enum

from agent_chat.chat.errors import UnsupportedProviderError

_OPENAI_PREFIXES: tuple[str, ...] = (
    "gpt",
    "chatgpt",
    "o1",
    "o3",
    "o4",
    "text-davinci",
    "davinci",
    "curie",
    "babbage",
)
_ANTHROPIC_PREFIXES: tuple[str, ...] = ("claude",)


class ProviderName(str, enum.Enum):
    """Upstream API families the chat core can talk to."""

    OPENAI = "openai"
    ANTHROPIC = "anthropic"


def canonical_provider(model: str) -> ProviderName:
    """Derive the canonical provider from a model identifier.

    Matching is case-insensitive on the name prefix
    (``gpt-4o`` -> openai, ``claude-3-5-sonnet`` -> anthropic).

    Args:
        model: Model identifier configured on the agent.

    Returns:
        The provider that serves the model.

    Raises:
        UnsupportedProviderError: If no provider naming convention matches.
    """
    name = (model or "").strip().lower()
    if name.startswith(_ANTHROPIC_PREFIXES):
        return ProviderName.ANTHROPIC
    if name.startswith(_OPENAI_PREFIXES):
        return ProviderName.OPENAI
    raise UnsupportedProviderError(model)
