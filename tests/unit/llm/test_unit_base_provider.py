# tests/unit/llm/test_unit_base_provider.py — v1
"""Tests for llm/base_provider.py — batch, streaming and cancellation."""

from __future__ import annotations

import asyncio
import io

import pytest
from PIL import Image

from ink2md.config.sources import GenerationPreset
from ink2md.llm.base_provider import BaseVisionProvider
from ink2md.llm.models import ProviderError
from ink2md.pipeline.state import CancellationToken


class FakeProvider(BaseVisionProvider):
    def __init__(self, preset, reply="# Note", fragments=None, streaming=False):
        super().__init__(preset)
        self.reply = reply
        self.fragments = fragments
        self.streaming = streaming
        self.calls: list[tuple[str, list]] = []

    @property
    def provider_name(self) -> str:
        return "fake"

    @property
    def supports_streaming(self) -> bool:
        return self.streaming

    async def _complete(self, text, images):
        self.calls.append((text, images))
        return self.reply

    async def _stream(self, text, images):
        self.calls.append((text, images))
        for fragment in self.fragments:
            if fragment is Ellipsis:
                await asyncio.Event().wait()  # never arrives
            yield fragment


@pytest.fixture
def fake_preset():
    return GenerationPreset(id="p", provider="local", prompt_template="Transcribe.")


@pytest.fixture
def note(make_source, make_note):
    return make_note(make_source("/in/My Note.pdf"), pages=2)


class TestGenerateMarkdown:
    @pytest.mark.asyncio
    async def test_prompt_and_scaled_images(self, fake_preset, note):
        provider = FakeProvider(fake_preset)
        result = await provider.generate_markdown(note, 20, CancellationToken())

        assert result == "# Note"
        text, images = provider.calls[0]
        assert text == "Transcribe.\nTitle: my-note"
        assert len(images) == 2
        with Image.open(io.BytesIO(images[0].data)) as img:
            assert img.width == 20

    @pytest.mark.asyncio
    async def test_zero_width_keeps_original(self, fake_preset, note):
        provider = FakeProvider(fake_preset)
        await provider.generate_markdown(note, 0, CancellationToken())
        assert provider.calls[0][1][0].data == note.pages[0].data

    @pytest.mark.asyncio
    @pytest.mark.parametrize("reply", ["", "   \n"])
    async def test_empty_response_raises(self, fake_preset, note, reply):
        with pytest.raises(ProviderError, match="empty"):
            await FakeProvider(fake_preset, reply=reply).generate_markdown(
                note, 0, CancellationToken()
            )

    def test_model_resolved_from_preset(self, fake_preset):
        assert FakeProvider(fake_preset).model == "llama3.2-vision"


class TestStreamMarkdown:
    @pytest.mark.asyncio
    async def test_batch_fallback_emits_once(self, fake_preset, note):
        received: list[str] = []

        async def on_fragment(text):
            received.append(text)

        await FakeProvider(fake_preset).stream_markdown(note, 0, on_fragment, CancellationToken())
        assert received == ["# Note"]

    @pytest.mark.asyncio
    async def test_fragments_in_order(self, fake_preset, note):
        received: list[str] = []

        async def on_fragment(text):
            received.append(text)

        provider = FakeProvider(fake_preset, fragments=["# T", "", "itle", "\nbody"], streaming=True)
        await provider.stream_markdown(note, 0, on_fragment, CancellationToken())
        assert received == ["# T", "itle", "\nbody"]

    @pytest.mark.asyncio
    async def test_cancel_between_fragments(self, fake_preset, note):
        token = CancellationToken()
        received: list[str] = []

        async def on_fragment(text):
            received.append(text)
            token.cancel()

        provider = FakeProvider(fake_preset, fragments=["a", "b", "c"], streaming=True)
        await provider.stream_markdown(note, 0, on_fragment, token)
        assert received == ["a"]

    @pytest.mark.asyncio
    async def test_cancel_while_waiting_for_fragment(self, fake_preset, note):
        token = CancellationToken()
        received: list[str] = []

        async def on_fragment(text):
            received.append(text)
            asyncio.get_running_loop().call_later(0.01, token.cancel)

        provider = FakeProvider(fake_preset, fragments=["a", Ellipsis, "never"], streaming=True)
        await asyncio.wait_for(provider.stream_markdown(note, 0, on_fragment, token), timeout=2)
        assert received == ["a"]

    @pytest.mark.asyncio
    async def test_empty_stream_raises(self, fake_preset, note):
        async def on_fragment(text):
            raise AssertionError("unexpected fragment")

        provider = FakeProvider(fake_preset, fragments=[], streaming=True)
        with pytest.raises(ProviderError, match="empty stream"):
            await provider.stream_markdown(note, 0, on_fragment, CancellationToken())

    @pytest.mark.asyncio
    async def test_already_cancelled_emits_nothing(self, fake_preset, note):
        token = CancellationToken()
        token.cancel()
        received: list[str] = []

        async def on_fragment(text):
            received.append(text)

        provider = FakeProvider(fake_preset, fragments=["a"], streaming=True)
        await provider.stream_markdown(note, 0, on_fragment, token)
        assert received == []
