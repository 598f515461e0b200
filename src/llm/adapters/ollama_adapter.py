# src/llm/adapters/ollama_adapter.py — v2
"""Local model adapter (Ollama) implementing BaseVisionProvider.

Uses the ollama Python SDK; images are passed base64-encoded on the
user message. Vision support is model-dependent.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, AsyncIterator

from ink2md.llm.base_provider import BaseVisionProvider
from ink2md.llm.models import ImageInput

logger = logging.getLogger(__name__)

DEFAULT_OLLAMA_HOST = "http://localhost:11434"


class OllamaAdapter(BaseVisionProvider):
    """Ollama local inference adapter."""

    @property
    def provider_name(self) -> str:
        return "local"

    @property
    def supports_streaming(self) -> bool:
        return True

    @property
    def host(self) -> str:
        return self._endpoint or DEFAULT_OLLAMA_HOST

    def _client(self):
        import ollama

        return ollama.AsyncClient(host=self.host)

    def _messages(self, text: str, images: list[ImageInput]) -> list[dict[str, Any]]:
        img_data = [base64.b64encode(img.data).decode() for img in images]
        return [{"role": "user", "content": text, "images": img_data}]

    async def _complete(self, text: str, images: list[ImageInput]) -> str:
        resp = await self._client().chat(
            model=self._model,
            messages=self._messages(text, images),
            options={"num_predict": self._preset.max_tokens},
        )
        return resp["message"]["content"] or ""

    async def _stream(self, text: str, images: list[ImageInput]) -> AsyncIterator[str]:
        stream = await self._client().chat(
            model=self._model,
            messages=self._messages(text, images),
            options={"num_predict": self._preset.max_tokens},
            stream=True,
        )
        async for part in stream:
            content = part["message"]["content"]
            if content:
                yield content
