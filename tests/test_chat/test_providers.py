"""Unit tests for canonical provider detection."""

import pytest

from agent_chat.chat.errors import UnsupportedProviderError
from agent_chat.chat.providers import ProviderName, canonical_provider


class TestCanonicalProvider:
    """Tests for canonical_provider()."""

    @pytest.mark.parametrize(
        "model",
        ["gpt-4o", "GPT-3.5-turbo", "gpt-4-turbo-preview", "text-davinci-003", "o1-mini", "o3"],
    )
    def test_openai_models(self, model: str) -> None:
        assert canonical_provider(model) is ProviderName.OPENAI

    @pytest.mark.parametrize(
        "model",
        [
            "claude-3-5-sonnet-20240620",
            "Claude-3-Opus",
            "claude-3.7-sonnet",
            "claude-instant-1",
            "claude-x-gpt-distill",
        ],
    )
    def test_anthropic_models(self, model: str) -> None:
        assert canonical_provider(model) is ProviderName.ANTHROPIC

    @pytest.mark.parametrize("model", ["llama-3-70b", "mistral-large", "my-gpt-clone", "", "   "])
    def test_unknown_models_raise(self, model: str) -> None:
        with pytest.raises(UnsupportedProviderError) as exc_info:
            canonical_provider(model)

        assert exc_info.value.code == "unsupported_provider"

    def test_provider_values(self) -> None:
        assert ProviderName.OPENAI.value == "openai"
        assert ProviderName.ANTHROPIC.value == "anthropic"
