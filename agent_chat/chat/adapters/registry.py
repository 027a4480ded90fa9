"""Adapter registry for getting the right adapter by canonical provider."""

from typing import Dict

import httpx

from agent_chat.chat.adapters.anthropic import AnthropicAdapter
from agent_chat.chat.adapters.base import ProviderAdapter
from agent_chat.chat.adapters.openai import OpenAIAdapter
from agent_chat.chat.errors import UnsupportedProviderError
from agent_chat.chat.providers import ProviderName
from agent_chat.settings import Settings


class AdapterRegistry:
    """Registry of provider adapters.

    Maps canonical providers to adapter instances. The orchestrator only
    talks to adapters through this registry, so supporting another provider
    is one ``register`` call.
    """

    def __init__(self) -> None:
        """Initialize empty adapter registry."""
        self._adapters: Dict[ProviderName, ProviderAdapter] = {}

    def register(self, adapter: ProviderAdapter) -> None:
        """Register an adapter under its provider.

        Args:
            adapter: ProviderAdapter instance.
        """
        self._adapters[adapter.provider] = adapter

    def get(self, provider: ProviderName) -> ProviderAdapter:
        """Get the adapter for a provider.

        Args:
            provider: Canonical provider.

        Returns:
            Registered adapter.

        Raises:
            UnsupportedProviderError: If no adapter is registered.
        """
        adapter = self._adapters.get(provider)
        if adapter is None:
            raise UnsupportedProviderError(provider.value)
        return adapter

    def list_providers(self) -> list[ProviderName]:
        """List all registered providers."""
        return list(self._adapters.keys())


def build_default_registry(client: httpx.AsyncClient, settings: Settings) -> AdapterRegistry:
    """Create a registry with the OpenAI and Anthropic adapters.

    Args:
        client: Shared async HTTP client.
        settings: Application settings with provider base URLs.

    Returns:
        Populated AdapterRegistry.
    """
    registry = AdapterRegistry()
    registry.register(OpenAIAdapter(client, settings.openai_base_url))
    registry.register(
        AnthropicAdapter(client, settings.anthropic_base_url, settings.anthropic_version)
    )
    return registry
