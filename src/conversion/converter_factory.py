# src/conversion/converter_factory.py — v1
"""Factory + dispatcher: pick a converter by source format and run it."""

from __future__ import annotations

import asyncio
import logging

from ink2md.conversion.base_converter import BaseConverter, ConversionOptions
from ink2md.conversion.image_converter import ImageConverter
from ink2md.conversion.pdf_converter import PdfConverter
from ink2md.conversion.supernote_converter import SupernoteConverter
from ink2md.core.models import ConvertedNote, Source

logger = logging.getLogger(__name__)

# Registry maps input format → converter class.
_CONVERTER_REGISTRY: dict[str, type[BaseConverter]] = {
    "image": ImageConverter,
    "pdf": PdfConverter,
    "supernote": SupernoteConverter,
}


class UnsupportedFormatError(ValueError):
    """Raised when no converter is registered for a format."""


def create_converter(fmt: str) -> BaseConverter:
    """Create the converter for an input format.

    Raises:
        UnsupportedFormatError: If no converter is registered.
    """
    cls = _CONVERTER_REGISTRY.get(fmt)
    if cls is None:
        raise UnsupportedFormatError(
            f"No converter for format {fmt!r}. "
            f"Supported: {', '.join(sorted(_CONVERTER_REGISTRY))}"
        )
    return cls()


async def convert_source(source: Source, options: ConversionOptions) -> ConvertedNote | None:
    """Convert a source off the event loop.

    Returns None (after logging) when the format is unknown or conversion
    fails; never raises for expected format problems.
    """
    try:
        converter = create_converter(source.format)
    except UnsupportedFormatError as e:
        logger.warning("%s — skipping %s", e, source.file_path)
        return None
    return await asyncio.to_thread(converter.convert, source, options)
