# src/conversion/base_converter.py — v1
"""Abstract converter interface for input formats."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from ink2md.core.models import ConvertedNote, InputFormat, Source


@dataclass(frozen=True)
class ConversionOptions:
    """Rasterization limits taken from the source configuration."""

    max_width: int = 0
    dpi: int = 300


class BaseConverter(ABC):
    """Turns one source file into ordered PNG pages."""

    @property
    @abstractmethod
    def format(self) -> InputFormat:
        """Input format handled by this converter."""

    @abstractmethod
    def convert(self, source: Source, options: ConversionOptions) -> ConvertedNote | None:
        """Rasterize ``source``. Returns None when the file cannot be converted."""

    @staticmethod
    def page_file_name(source: Source, page_number: int) -> str:
        return f"{source.basename}-page-{page_number}.png"
