# src/config/sources.py — v1
"""Immutable import configuration: source configurations and generation presets.

A run receives one ImportConfig snapshot and never mutates it. Persisting an
edited configuration is a separate, explicit commit (save_import_config).
Field names accept both snake_case and the camelCase used by older
plugin data files (``llmPresetId``, ``replaceExisting`` ...).
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ink2md.config.settings import ConfigurationError, Settings

logger = logging.getLogger(__name__)

DEFAULT_PROMPT = """Convert handwritten notes to markdown. Treat all supplied pages as one note.

If a task has a due date, format it in the following pattern:
- [ ] Task text 📅 2026-01-21
If a task has an exclamation mark, make it high priority:
- [!] Task text ...
If there is a star symbol, convert it to a #star tag.
If text is highlighted, make it bold.
If there is a drawn flow convert it to mermaid.
If there is just a drawing, ignore it.
Convert tables to markdown tables.

Return plain markdown without any additional text or annotations."""

DEFAULT_PRESET_ID = "preset-default"
DEFAULT_SOURCE_ID = "source-default"
DEFAULT_OUTPUT_ROOT = "Ink2MD"

ProviderKind = Literal["openai", "anthropic", "gemini", "local"]

# Provider kinds that cannot run without an API key.
PROVIDERS_REQUIRING_CREDENTIAL: frozenset[str] = frozenset({"openai", "anthropic", "gemini"})

_DEFAULT_MODELS: dict[str, str] = {
    "openai": "gpt-4o-mini",
    "anthropic": "claude-3-5-sonnet-20240620",
    "gemini": "gemini-1.5-flash",
    "local": "llama3.2-vision",
}


class _Snapshot(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


class GenerationPreset(_Snapshot):
    """Named provider profile used to generate Markdown."""

    id: str
    label: str = "Preset"
    provider: ProviderKind = "openai"
    generation_mode: Literal["batch", "stream"] = "batch"
    model: str = ""
    endpoint: str = ""
    api_key: str = Field(default="", repr=False)
    api_key_env: str = ""
    prompt_template: str = DEFAULT_PROMPT
    image_detail: Literal["low", "high"] = "low"
    llm_max_width: int = 512
    max_tokens: int = 2048

    @property
    def resolved_model(self) -> str:
        return self.model.strip() or _DEFAULT_MODELS[self.provider]

    @property
    def requires_credential(self) -> bool:
        return self.provider in PROVIDERS_REQUIRING_CREDENTIAL


class SourceConfig(_Snapshot):
    """A named group of watch directories plus import options."""

    id: str
    label: str = "Source"
    type: str = "filesystem"
    directories: tuple[str, ...] = ()
    recursive: bool = True
    include_images: bool = True
    include_pdfs: bool = True
    include_supernote: bool = True
    attachment_max_width: int = 0
    pdf_dpi: int = 300
    replace_existing: bool = False
    output_folder: str = DEFAULT_OUTPUT_ROOT
    open_generated_notes: bool = False
    llm_preset_id: str | None = None

    @property
    def conflict_policy(self) -> Literal["replace", "keep_both"]:
        return "replace" if self.replace_existing else "keep_both"


class ImportConfig(_Snapshot):
    """Ordered source configurations and generation presets."""

    sources: tuple[SourceConfig, ...] = ()
    llm_presets: tuple[GenerationPreset, ...] = ()

    def find_preset(self, preset_id: str | None) -> GenerationPreset | None:
        if not preset_id:
            return None
        for preset in self.llm_presets:
            if preset.id == preset_id:
                return preset
        return None


def default_import_config() -> ImportConfig:
    """One filesystem source (no directories yet) linked to the default preset."""
    return ImportConfig(
        sources=(
            SourceConfig(
                id=DEFAULT_SOURCE_ID,
                label="Source 1",
                output_folder=f"{DEFAULT_OUTPUT_ROOT}/Source 1",
                llm_preset_id=DEFAULT_PRESET_ID,
            ),
        ),
        llm_presets=(GenerationPreset(id=DEFAULT_PRESET_ID, label="Default preset"),),
    )


def load_import_config(path: Path) -> ImportConfig:
    """Load an ImportConfig snapshot from a JSON file.

    A missing file yields the default configuration.

    Raises:
        ConfigurationError: If the file exists but cannot be parsed.
    """
    path = Path(path).expanduser()
    if not path.exists():
        logger.info("No import configuration at %s, using defaults", path)
        return default_import_config()
    try:
        return ImportConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise ConfigurationError(f"Invalid import configuration {path}: {e}") from e


def save_import_config(config: ImportConfig, path: Path) -> None:
    """Commit a configuration snapshot (temp file + atomic rename)."""
    path = Path(path).expanduser()
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp = path.with_suffix(path.suffix + ".tmp")
    data = config.model_dump(mode="json", by_alias=False)
    tmp.write_text(json.dumps(data, ensure_ascii=False, indent=2), encoding="utf-8")
    tmp.replace(path)


def resolve_credential(preset: GenerationPreset, settings: Settings | None = None) -> str:
    """Resolve a preset's API key.

    Resolution order:
      1. Key stored on the preset
      2. Environment variable named by ``api_key_env``
      3. Provider key from Settings
    """
    if preset.api_key.strip():
        return preset.api_key.strip()
    if preset.api_key_env:
        from_env = os.environ.get(preset.api_key_env, "").strip()
        if from_env:
            return from_env
    if settings is not None:
        return settings.provider_api_key(preset.provider).strip()
    return ""
