# src/llm/adapters/gemini_adapter.py — v2
"""Google Gemini adapter implementing BaseVisionProvider.

Uses the google-generativeai SDK. Some models return cumulative text in
each streamed chunk rather than deltas, so chunks are reduced to the
unseen suffix before being emitted. A stream that produces nothing falls
back to a single batch call.
"""

from __future__ import annotations

import logging
from typing import Any, AsyncIterator

from ink2md.llm.base_provider import BaseVisionProvider
from ink2md.llm.models import ImageInput

logger = logging.getLogger(__name__)


class GeminiAdapter(BaseVisionProvider):
    """Google Gemini vision adapter."""

    @property
    def provider_name(self) -> str:
        return "gemini"

    @property
    def supports_streaming(self) -> bool:
        return True

    def _model_handle(self):
        import google.generativeai as genai

        genai.configure(api_key=self._api_key or "")
        return genai.GenerativeModel(self._model)

    def _parts(self, text: str, images: list[ImageInput]) -> list[dict[str, Any]]:
        parts: list[dict[str, Any]] = [{"text": text}]
        for img in images:
            parts.append({"inline_data": {"mime_type": img.media_type, "data": img.data}})
        return parts

    def _generation_config(self) -> dict[str, Any]:
        return {"max_output_tokens": self._preset.max_tokens}

    async def _complete(self, text: str, images: list[ImageInput]) -> str:
        model = self._model_handle()
        resp = await model.generate_content_async(
            self._parts(text, images), generation_config=self._generation_config(),
        )
        return _response_text(resp)

    async def _stream(self, text: str, images: list[ImageInput]) -> AsyncIterator[str]:
        model = self._model_handle()
        resp = await model.generate_content_async(
            self._parts(text, images),
            generation_config=self._generation_config(),
            stream=True,
        )
        seen = ""
        async for chunk in resp:
            delta, seen = split_delta(seen, _response_text(chunk))
            if delta:
                yield delta

        if not seen:
            logger.info("Gemini stream returned no text, retrying as a batch request")
            fallback = await self._complete(text, images)
            if fallback:
                yield fallback


def split_delta(seen: str, chunk: str) -> tuple[str, str]:
    """Return (new text, accumulated text) for a possibly cumulative chunk."""
    if not chunk:
        return "", seen
    if seen and chunk.startswith(seen):
        return chunk[len(seen):], chunk
    return chunk, seen + chunk


def _response_text(resp: Any) -> str:
    # ``resp.text`` raises when the candidate carries no text parts.
    try:
        return resp.text or ""
    except (ValueError, AttributeError):
        return ""
