# src/llm/base_provider.py — v1
"""Abstract vision provider interface.

Every provider turns a ``ConvertedNote`` into Markdown, either as one
complete string (batch) or as an ordered sequence of fragments
(streaming). Providers without a native incremental transport inherit a
``stream_markdown`` that emits the batch result once.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import AsyncIterator, Awaitable, Callable

from ink2md.config.sources import GenerationPreset
from ink2md.core.models import ConvertedNote
from ink2md.llm.image_scaling import prepare_images
from ink2md.llm.models import ImageInput, ProviderError, build_user_text
from ink2md.pipeline.state import CANCELLED, CancellationToken

logger = logging.getLogger(__name__)

FragmentCallback = Callable[[str], Awaitable[None]]


class BaseVisionProvider(ABC):
    """Unified interface for all Markdown generation providers."""

    def __init__(
        self,
        preset: GenerationPreset,
        api_key: str | None = None,
        endpoint: str | None = None,
    ) -> None:
        self._preset = preset
        self._api_key = api_key
        self._endpoint = endpoint or preset.endpoint or None
        self._model = preset.resolved_model

    @property
    @abstractmethod
    def provider_name(self) -> str:
        """Provider identifier (openai, anthropic, gemini, local)."""

    @property
    def supports_streaming(self) -> bool:
        return False

    @property
    def model(self) -> str:
        return self._model

    @abstractmethod
    async def _complete(self, text: str, images: list[ImageInput]) -> str:
        """Single request/response call returning the raw text."""

    async def _stream(self, text: str, images: list[ImageInput]) -> AsyncIterator[str]:
        """Incremental transport. Only called when ``supports_streaming``."""
        raise NotImplementedError(f"{self.provider_name} has no streaming transport")
        yield  # pragma: no cover

    async def generate_markdown(
        self, note: ConvertedNote, max_width: int, token: CancellationToken
    ) -> str:
        """Request the full transcription.

        Raises:
            ProviderError: If the provider returns empty text.
        """
        images = await prepare_images(note, max_width)
        text = build_user_text(self._preset.prompt_template, note.source.basename)
        result = await self._complete(text, images)
        if not result or not result.strip():
            raise ProviderError(self.provider_name, "empty response")
        return result

    async def stream_markdown(
        self,
        note: ConvertedNote,
        max_width: int,
        on_fragment: FragmentCallback,
        token: CancellationToken,
    ) -> None:
        """Deliver the transcription as fragments, in arrival order.

        Returns early, without error, once ``token`` is cancelled.
        """
        if not self.supports_streaming:
            result = await self.generate_markdown(note, max_width, token)
            if not token.cancelled:
                await on_fragment(result)
            return

        images = await prepare_images(note, max_width)
        text = build_user_text(self._preset.prompt_template, note.source.basename)
        emitted = 0
        stream = self._stream(text, images)
        try:
            while True:
                fragment = await token.race(_next_fragment(stream))
                if fragment is CANCELLED:
                    logger.info("Stream from %s stopped by cancellation", self.provider_name)
                    return
                if fragment is None:
                    break
                if not fragment:
                    continue
                emitted += 1
                await on_fragment(fragment)
        finally:
            await stream.aclose()

        if emitted == 0 and not token.cancelled:
            raise ProviderError(self.provider_name, "empty stream")


async def _next_fragment(stream: AsyncIterator[str]) -> str | None:
    try:
        return await stream.__anext__()
    except StopAsyncIteration:
        return None
