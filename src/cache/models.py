# src/cache/models.py — v2
"""Cache domain models: FingerprintRecord, FreshnessResult.

Records are keyed by Source identifier. Each update replaces the whole
record; a record is never partially written.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class FingerprintRecord(BaseModel):
    """Content fingerprint of a source at the time it was last processed.

    ``mtime_ms`` is the modification time in milliseconds (float). Camel-case
    aliases keep records written by older releases readable.
    """

    model_config = ConfigDict(
        frozen=True, alias_generator=to_camel, populate_by_name=True, extra="ignore",
    )

    digest: str = Field(alias="hash")
    size: int
    mtime_ms: float
    processed_at: str = ""
    output_folder: str = ""
    source_id: str = Field(default="", description="Owning source configuration id")


class FreshnessResult(BaseModel):
    """Outcome of a freshness evaluation for one source."""

    must_process: bool
    fingerprint: FingerprintRecord | None = None
    previous_output_folder: str | None = None
