# src/batch/models.py — v2
"""Job collection models: CollectionResult."""

from __future__ import annotations

from pydantic import BaseModel, Field

from ink2md.core.models import ImportJob


class CollectionResult(BaseModel):
    """Ordered jobs plus one diagnostic per excluded configuration."""

    jobs: list[ImportJob] = Field(default_factory=list)
    diagnostics: list[str] = Field(default_factory=list)
    eligible_configs: int = 0
