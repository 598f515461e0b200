# src/llm/adapters/anthropic_adapter.py — v3
"""Anthropic Claude adapter implementing BaseVisionProvider.

Uses the official anthropic SDK. Images are sent as base64 content
blocks ahead of the prompt text. Streaming reads ``text_stream`` from
``messages.stream``.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, AsyncIterator

from ink2md.llm.base_provider import BaseVisionProvider
from ink2md.llm.models import ImageInput

logger = logging.getLogger(__name__)


class AnthropicAdapter(BaseVisionProvider):
    """Adapter for Anthropic Claude models."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init Anthropic client (only on first API call)."""
        if self.__client is None:
            try:
                import anthropic
            except ImportError as e:
                raise ImportError(
                    "anthropic package required: pip install anthropic"
                ) from e
            kwargs: dict[str, Any] = {"api_key": self._api_key or ""}
            if self._endpoint:
                kwargs["base_url"] = self._endpoint
            self.__client = anthropic.AsyncAnthropic(**kwargs)
        return self.__client

    @property
    def provider_name(self) -> str:
        return "anthropic"

    @property
    def supports_streaming(self) -> bool:
        return True

    def _params(self, text: str, images: list[ImageInput]) -> dict[str, Any]:
        content_blocks: list[dict[str, Any]] = []
        for img in images:
            content_blocks.append(
                {
                    "type": "image",
                    "source": {
                        "type": "base64",
                        "media_type": img.media_type,
                        "data": base64.b64encode(img.data).decode("ascii"),
                    },
                }
            )
        content_blocks.append({"type": "text", "text": text})
        return {
            "model": self._model,
            "max_tokens": self._preset.max_tokens,
            "messages": [{"role": "user", "content": content_blocks}],
        }

    async def _complete(self, text: str, images: list[ImageInput]) -> str:
        response = await self._client.messages.create(**self._params(text, images))
        return self._extract_content(response)

    async def _stream(self, text: str, images: list[ImageInput]) -> AsyncIterator[str]:
        async with self._client.messages.stream(**self._params(text, images)) as stream:
            async for delta in stream.text_stream:
                yield delta

    @staticmethod
    def _extract_content(response: Any) -> str:
        """Concatenate the text blocks of a Messages API response."""
        parts = [
            block.text
            for block in response.content
            if getattr(block, "type", None) == "text"
        ]
        return "".join(parts)
