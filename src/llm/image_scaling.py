# src/llm/image_scaling.py — v1
"""Downscale converted pages before they are sent to a provider."""

from __future__ import annotations

import asyncio

from ink2md.conversion.png_tools import scale_png_bytes
from ink2md.core.models import ConvertedNote
from ink2md.llm.models import ImageInput


def prepare_images_sync(note: ConvertedNote, max_width: int) -> list[ImageInput]:
    return [
        ImageInput(data=scale_png_bytes(page.data, max_width), file_name=page.file_name)
        for page in note.pages
    ]


async def prepare_images(note: ConvertedNote, max_width: int) -> list[ImageInput]:
    """Scale every page to ``max_width`` (0 keeps originals), off the event loop."""
    return await asyncio.to_thread(prepare_images_sync, note, max_width)
