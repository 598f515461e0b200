# src/config/settings.py — v2
"""Typed configuration loaded from .env via pydantic-settings.

Single source of truth for deployment-specific settings: where the import
configuration lives, where notes are written, which fingerprint cache
backend is used, provider credentials and logging.
The per-source / per-preset configuration lives in config.sources.
"""

from __future__ import annotations

import re
from pathlib import Path
from typing import Literal

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

_SIZE_RE = re.compile(r"^\d+\s*(B|KB|MB|GB)?$", re.IGNORECASE)


class ConfigurationError(Exception):
    """Raised when configuration is internally inconsistent."""


class Settings(BaseSettings):
    """Application settings loaded from .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # === Import configuration ===
    config_path: Path = Path("~/.ink2md/config.json")
    output_root: Path = Path(".")

    # === Fingerprint cache ===
    cache_backend: Literal["json", "sqlite"] = "json"
    cache_root: Path = Path("~/.ink2md/cache")

    # === Provider credentials ===
    openai_api_key: str = ""
    anthropic_api_key: str = ""
    google_api_key: str = ""
    ollama_base_url: str = "http://localhost:11434"
    llm_retry_enabled: bool = True

    # === Logging ===
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "text"] = "text"
    log_file: Path | None = None
    log_rotation: str = "10MB"
    log_retention: int = 30

    # --- Validators ---

    @field_validator("log_retention")
    @classmethod
    def validate_log_retention(cls, v: int) -> int:  # noqa: N805
        if v < 0:
            raise ValueError("log_retention must be >= 0")
        return v

    @model_validator(mode="after")
    def validate_config_consistency(self) -> Settings:
        """Validate cross-field consistency rules."""
        errors: list[str] = []

        if not _SIZE_RE.match(self.log_rotation.strip()):
            errors.append(f"LOG_ROTATION must look like '10MB', got {self.log_rotation!r}")

        if errors:
            raise ConfigurationError("; ".join(errors))

        return self

    # --- Helpers ---

    @property
    def resolved_output_root(self) -> Path:
        return self.output_root.expanduser()

    @property
    def resolved_config_path(self) -> Path:
        return self.config_path.expanduser()

    def provider_api_key(self, provider: str) -> str:
        """Return the settings-level credential for a provider kind."""
        return {
            "openai": self.openai_api_key,
            "anthropic": self.anthropic_api_key,
            "gemini": self.google_api_key,
        }.get(provider, "")
