# src/conversion/png_tools.py — v1
"""Pillow helpers shared by converters and LLM payload building."""

from __future__ import annotations

import io

from PIL import Image


def scale_to_width(image: Image.Image, max_width: int) -> Image.Image:
    """Downscale proportionally so width <= max_width (0 disables the limit)."""
    if max_width <= 0 or image.width <= max_width:
        return image
    scale = max_width / image.width
    size = (max(1, round(image.width * scale)), max(1, round(image.height * scale)))
    return image.resize(size, resample=Image.Resampling.LANCZOS)


def flatten_on_white(image: Image.Image) -> Image.Image:
    """Composite transparent images onto a white background."""
    if image.mode in ("RGBA", "LA", "P"):
        rgba = image.convert("RGBA")
        background = Image.new("RGBA", rgba.size, (255, 255, 255, 255))
        return Image.alpha_composite(background, rgba).convert("RGB")
    if image.mode not in ("RGB", "L"):
        return image.convert("RGB")
    return image


def encode_png(image: Image.Image) -> bytes:
    buf = io.BytesIO()
    image.save(buf, format="PNG", optimize=True)
    return buf.getvalue()


def scale_png_bytes(data: bytes, max_width: int) -> bytes:
    """Return PNG bytes no wider than ``max_width``; unchanged when already small."""
    if max_width <= 0:
        return data
    with Image.open(io.BytesIO(data)) as image:
        if image.width <= max_width:
            return data
        return encode_png(scale_to_width(image, max_width))
