# src/conversion/supernote_converter.py — v1
"""Supernote notebook (.note) converter using supernotelib.

Pages are rendered by supernotelib, composited onto white and scaled to
the attachment width limit. A notebook with no renderable pages is skipped.
"""

from __future__ import annotations

import logging

from ink2md.conversion.base_converter import BaseConverter, ConversionOptions
from ink2md.conversion.png_tools import encode_png, flatten_on_white, scale_to_width
from ink2md.core.models import ConvertedNote, ConvertedPage, Source

logger = logging.getLogger(__name__)


class SupernoteConverter(BaseConverter):
    """Render every notebook page to PNG."""

    @property
    def format(self) -> str:
        return "supernote"

    def convert(self, source: Source, options: ConversionOptions) -> ConvertedNote | None:
        try:
            import supernotelib as sn
            from supernotelib.converter import ImageConverter
        except ImportError as e:
            raise ImportError(
                "supernotelib package required for Supernote conversion: pip install supernotelib"
            ) from e

        try:
            notebook = sn.load_notebook(source.file_path)
            converter = ImageConverter(notebook)
            total = notebook.get_total_pages()
        except Exception as e:  # supernotelib raises its own parser errors
            logger.error("Failed to open Supernote file %s: %s", source.file_path, e)
            return None

        pages: list[ConvertedPage] = []
        for index in range(total):
            try:
                rendered = converter.convert(index)
            except Exception as e:
                logger.warning("Skipping page %d of %s: %s", index + 1, source.file_path, e)
                continue
            image = scale_to_width(flatten_on_white(rendered), options.max_width)
            pages.append(
                ConvertedPage(
                    page_number=len(pages) + 1,
                    file_name=self.page_file_name(source, len(pages) + 1),
                    width=image.width,
                    height=image.height,
                    data=encode_png(image),
                )
            )

        if not pages:
            logger.warning("No renderable pages found in %s", source.file_path)
            return None
        return ConvertedNote(source=source, pages=pages)
