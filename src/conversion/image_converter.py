# src/conversion/image_converter.py — v1
"""Raster image converter (PNG, JPEG, WEBP) using Pillow.

The whole image becomes the note's single page.
"""

from __future__ import annotations

import logging

from PIL import Image, ImageOps, UnidentifiedImageError

from ink2md.conversion.base_converter import BaseConverter, ConversionOptions
from ink2md.conversion.png_tools import encode_png, flatten_on_white, scale_to_width
from ink2md.core.models import ConvertedNote, ConvertedPage, Source

logger = logging.getLogger(__name__)


class ImageConverter(BaseConverter):
    """Decode, orient and downscale a single image."""

    @property
    def format(self) -> str:
        return "image"

    def convert(self, source: Source, options: ConversionOptions) -> ConvertedNote | None:
        try:
            with Image.open(source.file_path) as raw:
                image = ImageOps.exif_transpose(raw)
                image = flatten_on_white(image)
                image = scale_to_width(image, options.max_width)
                data = encode_png(image)
        except (OSError, UnidentifiedImageError, ValueError) as e:
            logger.error("Failed to convert image %s: %s", source.file_path, e)
            return None

        return ConvertedNote(
            source=source,
            pages=[
                ConvertedPage(
                    page_number=1,
                    file_name=f"{source.basename}.png",
                    width=image.width,
                    height=image.height,
                    data=data,
                )
            ],
        )
