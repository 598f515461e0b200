# tests/unit/llm/test_unit_provider_factory.py — v1
"""Tests for llm/provider_factory.py."""

from __future__ import annotations

import pytest

from ink2md.config.sources import GenerationPreset
from ink2md.llm.adapters.anthropic_adapter import AnthropicAdapter
from ink2md.llm.adapters.gemini_adapter import GeminiAdapter
from ink2md.llm.adapters.ollama_adapter import OllamaAdapter
from ink2md.llm.adapters.openai_adapter import OpenAIAdapter
from ink2md.llm.provider_factory import UnsupportedProviderError, create_provider


class TestCreateProvider:
    @pytest.mark.parametrize("kind, cls, name", [
        ("openai", OpenAIAdapter, "openai"),
        ("anthropic", AnthropicAdapter, "anthropic"),
        ("gemini", GeminiAdapter, "gemini"),
        ("local", OllamaAdapter, "local"),
    ])
    def test_registry(self, settings, kind, cls, name):
        provider = create_provider(GenerationPreset(id="p", provider=kind), settings)
        assert isinstance(provider, cls)
        assert provider.provider_name == name
        assert provider.supports_streaming is True

    def test_local_uses_settings_host(self, settings):
        s = settings.model_copy(update={"ollama_base_url": "http://gpu-box:11434"})
        provider = create_provider(GenerationPreset(id="p", provider="local"), s)
        assert provider.host == "http://gpu-box:11434"

    def test_local_preset_endpoint_wins(self, settings):
        preset = GenerationPreset(id="p", provider="local", endpoint="http://other:1")
        assert create_provider(preset, settings).host == "http://other:1"

    def test_credential_passed_through(self, settings):
        s = settings.model_copy(update={"anthropic_api_key": "sk-ant"})
        provider = create_provider(GenerationPreset(id="p", provider="anthropic"), s)
        assert provider._api_key == "sk-ant"

    def test_model_default(self, settings):
        provider = create_provider(GenerationPreset(id="p", provider="gemini"), settings)
        assert provider.model == "gemini-1.5-flash"

    def test_unsupported(self, settings):
        preset = GenerationPreset.model_construct(id="p", provider="azure")
        with pytest.raises(UnsupportedProviderError, match="azure"):
            create_provider(preset, settings)
