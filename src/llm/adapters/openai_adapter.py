# src/llm/adapters/openai_adapter.py — v2
"""OpenAI GPT adapter implementing BaseVisionProvider.

Uses the official openai SDK (chat completions with image_url parts).
Streaming uses ``stream=True``.
"""

from __future__ import annotations

import base64
import logging
from typing import Any, AsyncIterator

from ink2md.llm.base_provider import BaseVisionProvider
from ink2md.llm.models import ImageInput

logger = logging.getLogger(__name__)


class OpenAIAdapter(BaseVisionProvider):
    """OpenAI GPT vision adapter."""

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        super().__init__(*args, **kwargs)
        self.__client = None  # Lazy initialization

    @property
    def _client(self):
        """Lazy-init OpenAI client (only on first API call)."""
        if self.__client is None:
            try:
                import openai
            except ImportError as e:
                raise ImportError("openai package required: pip install openai") from e
            self.__client = openai.AsyncOpenAI(
                api_key=self._api_key or "", base_url=self._endpoint
            )
        return self.__client

    @property
    def provider_name(self) -> str:
        return "openai"

    @property
    def supports_streaming(self) -> bool:
        return True

    def _messages(self, text: str, images: list[ImageInput]) -> list[dict[str, Any]]:
        content_parts: list[dict[str, Any]] = [{"type": "text", "text": text}]
        for img in images:
            b64 = base64.b64encode(img.data).decode()
            content_parts.append({
                "type": "image_url",
                "image_url": {
                    "url": f"data:{img.media_type};base64,{b64}",
                    "detail": self._preset.image_detail,
                },
            })
        return [{"role": "user", "content": content_parts}]

    async def _complete(self, text: str, images: list[ImageInput]) -> str:
        resp = await self._client.chat.completions.create(
            model=self._model,
            messages=self._messages(text, images),
            max_tokens=self._preset.max_tokens,
        )
        if not resp.choices:
            return ""
        return resp.choices[0].message.content or ""

    async def _stream(self, text: str, images: list[ImageInput]) -> AsyncIterator[str]:
        stream = await self._client.chat.completions.create(
            model=self._model,
            messages=self._messages(text, images),
            max_tokens=self._preset.max_tokens,
            stream=True,
        )
        async for chunk in stream:
            if not chunk.choices:
                continue
            delta = chunk.choices[0].delta.content
            if delta:
                yield delta
