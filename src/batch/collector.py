# src/batch/collector.py — v1
"""Job collector — expands source configurations into an ordered job queue.

A configuration is excluded (with one user-visible diagnostic) when its type
is unsupported, it has no watch directories, it links no preset, the linked
preset cannot be resolved, or the preset's provider needs a credential that
is missing. Order is configuration order, then discovery order.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from ink2md.batch.models import CollectionResult
from ink2md.batch.scanner import discover
from ink2md.config.settings import Settings
from ink2md.config.sources import (
    GenerationPreset,
    ImportConfig,
    SourceConfig,
    resolve_credential,
)
from ink2md.core.models import ImportJob, Source

logger = logging.getLogger(__name__)

SUPPORTED_SOURCE_TYPES: frozenset[str] = frozenset({"filesystem"})

DiscoverFn = Callable[[SourceConfig], list[Source]]


class JobCollector:
    """Turn an ImportConfig snapshot into a flat list of ImportJobs."""

    def __init__(
        self,
        settings: Settings | None = None,
        discover_fn: DiscoverFn | None = None,
    ) -> None:
        self._settings = settings
        self._discover = discover_fn or discover

    async def collect(self, config: ImportConfig) -> CollectionResult:
        """Validate each configuration and discover its sources."""
        result = CollectionResult()

        for source_config in config.sources:
            preset, problem = self._resolve(source_config, config)
            if preset is None:
                message = f"Skipping source '{source_config.label}': {problem}"
                logger.warning(message)
                result.diagnostics.append(message)
                continue

            result.eligible_configs += 1

            sources = await asyncio.to_thread(self._discover, source_config)
            for source in sources:
                result.jobs.append(
                    ImportJob(source=source, config=source_config, preset=preset)
                )

        logger.info(
            "Collected %d jobs from %d/%d source configurations",
            len(result.jobs), result.eligible_configs, len(config.sources),
        )
        return result

    def _resolve(
        self, source_config: SourceConfig, config: ImportConfig,
    ) -> tuple[GenerationPreset | None, str]:
        """Return the linked preset, or None plus the reason it is unusable."""
        if source_config.type not in SUPPORTED_SOURCE_TYPES:
            return None, f"unsupported source type {source_config.type!r}"
        if not source_config.directories:
            return None, "no input directories configured"
        if not source_config.llm_preset_id:
            return None, "no LLM preset linked"
        preset = config.find_preset(source_config.llm_preset_id)
        if preset is None:
            return None, f"LLM preset {source_config.llm_preset_id!r} not found"
        if preset.requires_credential and not resolve_credential(preset, self._settings):
            return None, f"preset '{preset.label}' is missing an API key for {preset.provider}"
        return preset, ""
