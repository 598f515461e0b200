# tests/conftest.py — v2
"""Shared test fixtures for unit tests.

Provides settings isolated from the developer environment, source
configurations, presets, Source factories and in-memory PNG pages.
No network access: providers are faked at the interface.
"""

from __future__ import annotations

import io
from pathlib import Path

import pytest
from PIL import Image

from ink2md.config.settings import Settings
from ink2md.config.sources import GenerationPreset, SourceConfig
from ink2md.core.models import ConvertedNote, ConvertedPage, Source
from ink2md.core.naming import create_stable_id, slugify_file_path


def png_bytes(width: int = 40, height: int = 20, color: str = "white") -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", (width, height), color).save(buf, format="PNG")
    return buf.getvalue()


# === FIXTURES: Configuration ===


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings pointing every path at tmp_path, with no ambient credentials."""
    return Settings(
        _env_file=None,
        config_path=tmp_path / "config.json",
        output_root=tmp_path / "vault",
        cache_root=tmp_path / "cache",
        openai_api_key="",
        anthropic_api_key="",
        google_api_key="",
        llm_retry_enabled=False,
    )


@pytest.fixture
def preset() -> GenerationPreset:
    return GenerationPreset(id="p1", label="Local", provider="local", model="llava")


@pytest.fixture
def input_dir(tmp_path: Path) -> Path:
    d = tmp_path / "inbox"
    d.mkdir()
    return d


@pytest.fixture
def source_config(input_dir: Path) -> SourceConfig:
    return SourceConfig(
        id="cfg1",
        label="Inbox",
        directories=(str(input_dir),),
        llm_preset_id="p1",
        output_folder="Ink2MD",
    )


# === FIXTURES: Sources and converted notes ===


@pytest.fixture
def make_source():
    """Factory building a Source for an existing or hypothetical file."""

    def _make(
        file_path: str | Path,
        config_id: str = "cfg1",
        fmt: str = "pdf",
        root: str | Path | None = None,
        relative_folder: str = "",
    ) -> Source:
        path = str(file_path)
        return Source(
            id=create_stable_id(path, config_id),
            source_config_id=config_id,
            format=fmt,
            file_path=path,
            basename=slugify_file_path(path),
            input_root=str(root if root is not None else Path(path).parent),
            relative_folder=relative_folder,
        )

    return _make


@pytest.fixture
def make_note():
    """Factory building a ConvertedNote with ``pages`` small PNG pages."""

    def _make(source: Source, pages: int = 1) -> ConvertedNote:
        return ConvertedNote(
            source=source,
            pages=[
                ConvertedPage(
                    page_number=i,
                    file_name=f"{source.basename}-page-{i}.png",
                    width=40,
                    height=20,
                    data=png_bytes(),
                )
                for i in range(1, pages + 1)
            ],
        )

    return _make
