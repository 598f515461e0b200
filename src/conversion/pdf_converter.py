# src/conversion/pdf_converter.py — v2
"""PDF converter using PyMuPDF (fitz).

Each page is rendered at the configured DPI, lowered when needed so the
rendered width stays within the attachment width limit.
Requires the 'pymupdf' package.
"""

from __future__ import annotations

import logging

from ink2md.conversion.base_converter import BaseConverter, ConversionOptions
from ink2md.core.models import ConvertedNote, ConvertedPage, Source

logger = logging.getLogger(__name__)

_PDF_POINTS_PER_INCH = 72


class PdfConverter(BaseConverter):
    """Render every PDF page to PNG."""

    @property
    def format(self) -> str:
        return "pdf"

    def convert(self, source: Source, options: ConversionOptions) -> ConvertedNote | None:
        try:
            import fitz  # PyMuPDF
        except ImportError as e:
            raise ImportError(
                "pymupdf package required for PDF conversion: pip install pymupdf"
            ) from e

        try:
            doc = fitz.open(source.file_path)
        except (RuntimeError, ValueError, OSError) as e:
            logger.error("Failed to open PDF %s: %s", source.file_path, e)
            return None

        pages: list[ConvertedPage] = []
        try:
            for index in range(len(doc)):
                page = doc[index]
                zoom = self._zoom_for(page.rect.width, options)
                pix = page.get_pixmap(matrix=fitz.Matrix(zoom, zoom), alpha=False)
                pages.append(
                    ConvertedPage(
                        page_number=index + 1,
                        file_name=self.page_file_name(source, index + 1),
                        width=pix.width,
                        height=pix.height,
                        data=pix.tobytes("png"),
                    )
                )
        except (RuntimeError, ValueError) as e:
            logger.error("Failed to render PDF %s: %s", source.file_path, e)
            return None
        finally:
            doc.close()

        if not pages:
            logger.warning("PDF has no pages: %s", source.file_path)
            return None
        return ConvertedNote(source=source, pages=pages)

    @staticmethod
    def _zoom_for(page_width_pt: float, options: ConversionOptions) -> float:
        """Scale factor from PDF points to pixels, honoring max_width."""
        dpi = options.dpi if options.dpi > 0 else _PDF_POINTS_PER_INCH
        zoom = dpi / _PDF_POINTS_PER_INCH
        if options.max_width > 0 and page_width_pt * zoom > options.max_width:
            zoom = options.max_width / page_width_pt
        return zoom
