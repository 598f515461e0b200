# src/pipeline/models.py — v1
"""Import run reporting models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field

RunStatus = Literal[
    "completed", "cancelled", "configuration_required", "no_sources", "already_running"
]
JobOutcome = Literal["imported", "skipped", "failed", "cancelled"]


class ImportRunResult(BaseModel):
    """Outcome of one ``start_import`` call."""

    status: RunStatus
    imported: int = 0
    skipped: int = 0
    failed: int = 0
    diagnostics: list[str] = Field(default_factory=list)

    @property
    def message(self) -> str:
        if self.status == "cancelled":
            return "Ink2MD: import cancelled."
        if self.status == "already_running":
            return "Ink2MD: an import is already running."
        if self.status == "configuration_required":
            return "Ink2MD: configure at least one source directory and generation preset."
        if self.status == "no_sources":
            return "Ink2MD: no handwritten notes found."
        plural = "" if self.imported == 1 else "s"
        return f"Ink2MD: imported {self.imported} note{plural}."
