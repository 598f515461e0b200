# src/llm/provider_factory.py — v1
"""Factory: instantiate a vision provider from a generation preset.

Called once per preset per import run; the executor holds the instance
for the rest of the run.
"""

from __future__ import annotations

import importlib
import logging

from ink2md.config.settings import Settings
from ink2md.config.sources import GenerationPreset, resolve_credential
from ink2md.llm.base_provider import BaseVisionProvider

logger = logging.getLogger(__name__)

# Registry of provider kind → adapter class path (lazy import).
_PROVIDER_REGISTRY: dict[str, str] = {
    "openai": "ink2md.llm.adapters.openai_adapter.OpenAIAdapter",
    "anthropic": "ink2md.llm.adapters.anthropic_adapter.AnthropicAdapter",
    "gemini": "ink2md.llm.adapters.gemini_adapter.GeminiAdapter",
    "local": "ink2md.llm.adapters.ollama_adapter.OllamaAdapter",
}


class UnsupportedProviderError(ValueError):
    """Raised when a provider is not registered."""


def create_provider(
    preset: GenerationPreset,
    settings: Settings | None = None,
) -> BaseVisionProvider:
    """Instantiate the adapter for ``preset.provider``.

    The credential is resolved from the preset, then its environment
    variable, then ``settings``. Local models default their endpoint to
    ``settings.ollama_base_url``.

    Raises:
        UnsupportedProviderError: If the provider is not registered.
    """
    if preset.provider not in _PROVIDER_REGISTRY:
        raise UnsupportedProviderError(
            f"Unsupported LLM provider: {preset.provider!r}. "
            f"Available: {', '.join(sorted(_PROVIDER_REGISTRY))}"
        )

    adapter_cls = _import_class(_PROVIDER_REGISTRY[preset.provider])

    endpoint = preset.endpoint or None
    if preset.provider == "local" and not endpoint and settings is not None:
        endpoint = settings.ollama_base_url

    api_key = resolve_credential(preset, settings) or None

    logger.debug(
        "Creating provider: kind=%s, model=%s, mode=%s",
        preset.provider, preset.resolved_model, preset.generation_mode,
    )
    return adapter_cls(preset, api_key=api_key, endpoint=endpoint)


def _import_class(class_path: str) -> type:
    """Dynamically import a class from its fully qualified path."""
    module_path, class_name = class_path.rsplit(".", 1)
    module = importlib.import_module(module_path)
    return getattr(module, class_name)
