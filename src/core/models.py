# src/core/models.py — v2
"""Shared Pydantic domain models used across modules.

No module redefines these types — all imports come from core.models.
Sources and converted notes are transient: they are rebuilt on every
discovery pass and never persisted.
"""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ink2md.config.sources import GenerationPreset, SourceConfig

InputFormat = Literal["image", "pdf", "supernote"]


# === SOURCES ===


class Source(BaseModel):
    """One discovered input file."""

    model_config = ConfigDict(frozen=True)

    id: str
    source_config_id: str
    format: InputFormat
    file_path: str
    basename: str
    input_root: str
    relative_folder: str = ""


# === CONVERSION OUTPUT ===


class ConvertedPage(BaseModel):
    """A single rasterized page (1-based page number)."""

    page_number: int
    file_name: str
    width: int
    height: int
    data: bytes = Field(repr=False)


class ConvertedNote(BaseModel):
    """A source together with its ordered PNG pages."""

    source: Source
    pages: list[ConvertedPage] = Field(default_factory=list)


class ImageEmbed(BaseModel):
    """Relative attachment path plus the width it should be displayed at."""

    path: str
    width: float = 0


# === JOBS ===


class ImportJob(BaseModel):
    """One source paired with its owning configuration and resolved preset."""

    model_config = ConfigDict(frozen=True)

    source: Source
    config: SourceConfig
    preset: GenerationPreset
