"""Provider adapters that normalize upstream SDK streams into plain text."""

from agent_chat.chat.adapters.anthropic import AnthropicAdapter
from agent_chat.chat.adapters.base import (
    ChatCompletionRequest,
    ProviderAdapter,
    ProviderStream,
)
from agent_chat.chat.adapters.openai import OpenAIAdapter
from agent_chat.chat.adapters.registry import AdapterRegistry, build_default_registry

__all__ = [
    "AdapterRegistry",
    "AnthropicAdapter",
    "ChatCompletionRequest",
    "OpenAIAdapter",
    "ProviderAdapter",
    "ProviderStream",
    "build_default_registry",
]
