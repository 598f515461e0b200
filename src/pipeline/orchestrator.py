# src/pipeline/orchestrator.py — v3
"""Import executor: the sequential driver of one import run.

Per run:
  Scanning: collect jobs from every eligible source configuration.
  Per job, in collection order:
    1. cancellation check
    2. freshness (skip unchanged sources)
    3. conversion to PNG pages, then a cancellation check
    4. output folder allocation (reuse / replace / keep both)
    5. cancellation check
    6. Markdown generation, batch or streaming
    7. attachments, then the note
    8. fingerprint update
    9. optional note opener

Cancellation is cooperative: the run's token is raced against every
externally latent await and checked between steps. A job that has started
persisting its outputs finishes that step; no later job is started. A job
that stops before writing anything removes the folder it created.
"""

from __future__ import annotations

import logging
import posixpath
import uuid
from datetime import datetime, timezone
from typing import Awaitable, Callable

from ink2md.batch.collector import JobCollector
from ink2md.cache.cache_factory import create_cache_store
from ink2md.cache.freshness import FreshnessEvaluator
from ink2md.cache.models import FreshnessResult
from ink2md.config.settings import Settings
from ink2md.config.sources import GenerationPreset, ImportConfig, load_import_config
from ink2md.conversion.base_converter import ConversionOptions
from ink2md.conversion.converter_factory import convert_source
from ink2md.core.models import ConvertedNote, ImageEmbed, ImportJob, Source
from ink2md.llm.base_provider import BaseVisionProvider
from ink2md.llm.provider_factory import create_provider
from ink2md.llm.retry import with_retry
from ink2md.logging.context import clear_context, set_job_context, set_run_context, set_step
from ink2md.markdown.generator import (
    FAILURE_PLACEHOLDER,
    build_markdown,
    build_stream_footer,
    build_stream_header,
    embeds_for,
)
from ink2md.pipeline.models import ImportRunResult, JobOutcome
from ink2md.pipeline.state import CANCELLED, CancellationToken, ImportStatusController
from ink2md.storage.base_output_writer import BaseOutputWriter
from ink2md.storage.local_writer import LocalWriter
from ink2md.storage.output_folders import FolderAllocation, OutputFolderManager, join_path

logger = logging.getLogger(__name__)

ConfigSource = Callable[[], ImportConfig]
Converter = Callable[[Source, ConversionOptions], Awaitable[ConvertedNote | None]]
ProviderFactory = Callable[[GenerationPreset, Settings], BaseVisionProvider]
Notify = Callable[[str], None]
NoteOpener = Callable[[str], None]


class ImportExecutor:
    """Drives import runs over immutable configuration snapshots.

    Every collaborator is injectable; defaults build the filesystem,
    cache and provider stack from ``settings``.

    Args:
        settings: Application settings.
        config: Snapshot, or a callable returning a fresh snapshot per run.
            Defaults to loading ``settings.resolved_config_path``.
        controller: Shared run state; a private one is created if omitted.
        notify: Receives user-visible notices.
        note_opener: Called with the note path when a source configuration
            asks for generated notes to be opened.
    """

    def __init__(
        self,
        settings: Settings,
        config: ImportConfig | ConfigSource | None = None,
        *,
        collector: JobCollector | None = None,
        evaluator: FreshnessEvaluator | None = None,
        converter: Converter = convert_source,
        provider_factory: ProviderFactory = create_provider,
        writer: BaseOutputWriter | None = None,
        folder_manager: OutputFolderManager | None = None,
        controller: ImportStatusController | None = None,
        notify: Notify | None = None,
        note_opener: NoteOpener | None = None,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._settings = settings
        if config is None:
            self._load_config: ConfigSource = lambda: load_import_config(
                settings.resolved_config_path
            )
        elif isinstance(config, ImportConfig):
            self._load_config = lambda: config
        else:
            self._load_config = config
        self._collector = collector or JobCollector(settings)
        self._evaluator = evaluator or FreshnessEvaluator(create_cache_store(settings))
        self._convert = converter
        self._provider_factory = provider_factory
        self._writer = writer or LocalWriter(settings.resolved_output_root)
        self._folders = folder_manager or OutputFolderManager(self._writer)
        self._controller = controller or ImportStatusController()
        self._notify = notify or (lambda message: None)
        self._note_opener = note_opener
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    # ------------------------------------------------------------------
    # Trigger surface
    # ------------------------------------------------------------------

    @property
    def controller(self) -> ImportStatusController:
        return self._controller

    @property
    def status_text(self) -> str:
        return self._controller.status_text

    def request_cancel(self) -> bool:
        """Ask the active run to stop. Returns False when nothing is running."""
        accepted = self._controller.request_cancel()
        if accepted:
            self._notify("Ink2MD: cancelling current import...")
        return accepted

    async def reset_fingerprint_cache(self, scope: str | None = None) -> int:
        """Forget fingerprints (all, or those of one source configuration)."""
        removed = await self._evaluator.store.reset(scope)
        logger.info(
            "Removed %d fingerprint record(s)%s",
            removed, f" for source {scope!r}" if scope else "",
        )
        return removed

    async def start_import(self) -> ImportRunResult:
        """Run one import over the current configuration snapshot."""
        token = self._controller.try_begin()
        if token is None:
            result = ImportRunResult(status="already_running")
            self._notify(result.message)
            return result

        run_id = uuid.uuid4().hex[:12]
        set_run_context(run_id)
        result = ImportRunResult(status="completed")
        try:
            await self._run(token, result)
        finally:
            self._controller.finish(cancelled=result.status == "cancelled")
            clear_context()

        logger.info(
            "Import %s: %s (imported=%d skipped=%d failed=%d)",
            run_id, result.status, result.imported, result.skipped, result.failed,
        )
        if result.status in ("completed", "cancelled"):
            self._notify(result.message)
        return result

    # ------------------------------------------------------------------
    # Run loop
    # ------------------------------------------------------------------

    async def _run(self, token: CancellationToken, result: ImportRunResult) -> None:
        config = self._load_config()
        set_step("scan")
        collection = await token.race(self._collector.collect(config))
        if collection is CANCELLED:
            result.status = "cancelled"
            return

        for diagnostic in collection.diagnostics:
            result.diagnostics.append(diagnostic)
            self._notify(f"Ink2MD: {diagnostic}")

        if collection.eligible_configs == 0:
            result.status = "configuration_required"
            self._notify(result.message)
            return
        if not collection.jobs:
            result.status = "no_sources"
            self._notify(result.message)
            return

        providers: dict[str, BaseVisionProvider] = {}
        total = len(collection.jobs)
        for index, job in enumerate(collection.jobs, start=1):
            if token.cancelled:
                result.status = "cancelled"
                break

            self._controller.set_status(f"Processing {index}/{total}: {job.source.basename}")
            set_job_context(job.source.id, "freshness")
            outcome = await self._run_job(job, token, providers)

            if outcome == "imported":
                result.imported += 1
            elif outcome == "skipped":
                result.skipped += 1
            elif outcome == "failed":
                result.failed += 1
            else:
                result.status = "cancelled"
                break
        else:
            if token.cancelled:
                result.status = "cancelled"

    async def _run_job(
        self,
        job: ImportJob,
        token: CancellationToken,
        providers: dict[str, BaseVisionProvider],
    ) -> JobOutcome:
        source, config, preset = job.source, job.config, job.preset

        freshness = await token.race(self._evaluator.evaluate(source))
        if freshness is CANCELLED:
            return "cancelled"
        if not freshness.must_process:
            logger.debug("Skipping unchanged source %s", source.file_path)
            return "skipped"

        set_step("convert")
        options = ConversionOptions(max_width=config.attachment_max_width, dpi=config.pdf_dpi)
        try:
            note = await token.race(self._convert(source, options))
        except Exception:
            logger.exception("Conversion crashed for %s", source.file_path)
            return "failed"
        if note is CANCELLED or token.cancelled:
            return "cancelled"
        if note is None or not note.pages:
            logger.warning("Conversion produced no pages for %s, skipping", source.file_path)
            return "failed"

        set_step("folder")
        try:
            allocation = await self._folders.ensure_folder(
                source, config, freshness.previous_output_folder
            )
        except OSError as e:
            logger.error("Cannot prepare output folder for %s: %s", source.file_path, e)
            self._notify(f"Ink2MD: cannot write output for {source.basename}.")
            return "failed"
        folder = allocation.path

        if token.cancelled:
            await self._release_folder(allocation)
            return "cancelled"

        set_step("generate")
        provider = self._provider_for(preset, providers)
        note_path = join_path(folder, f"{source.basename}.md")
        try:
            if preset.generation_mode == "stream":
                outcome = await self._generate_streaming(note, preset, provider, note_path, token)
            else:
                outcome = await self._generate_batch(note, preset, provider, note_path, token)
        except OSError as e:
            logger.error("Failed to write outputs for %s: %s", source.file_path, e)
            self._notify(f"Ink2MD: cannot write output for {source.basename}.")
            await self._release_folder(allocation)
            return "failed"
        if outcome == "cancelled":
            await self._release_folder(allocation)
            return outcome

        set_step("remember")
        await self._remember(source, freshness, folder)

        if config.open_generated_notes and self._note_opener is not None:
            try:
                self._note_opener(note_path)
            except Exception as e:  # UI side effect only
                logger.warning("Could not open %s: %s", note_path, e)
        return outcome

    # ------------------------------------------------------------------
    # Generation
    # ------------------------------------------------------------------

    def _provider_for(
        self, preset: GenerationPreset, providers: dict[str, BaseVisionProvider]
    ) -> BaseVisionProvider | None:
        """One provider instance per preset for the whole run."""
        if preset.id not in providers:
            try:
                providers[preset.id] = self._provider_factory(preset, self._settings)
            except Exception as e:
                logger.warning("Cannot create provider for preset '%s': %s", preset.label, e)
                return None
        return providers[preset.id]

    async def _request_batch(
        self, provider: BaseVisionProvider | None, note: ConvertedNote, preset: GenerationPreset,
        token: CancellationToken,
    ) -> str:
        if provider is None:
            raise RuntimeError(f"no provider available for preset '{preset.label}'")
        if self._settings.llm_retry_enabled:
            return await with_retry(
                provider.generate_markdown, note, preset.llm_max_width, token,
                operation=f"{provider.provider_name}:{note.source.basename}",
            )
        return await provider.generate_markdown(note, preset.llm_max_width, token)

    async def _generate_batch(
        self,
        note: ConvertedNote,
        preset: GenerationPreset,
        provider: BaseVisionProvider | None,
        note_path: str,
        token: CancellationToken,
    ) -> JobOutcome:
        try:
            text = await token.race(self._request_batch(provider, note, preset, token))
        except Exception as e:
            logger.warning("Generation failed for %s: %s", note.source.file_path, e)
            self._notify(f"Ink2MD: generation failed for {note.source.basename}.")
            text = FAILURE_PLACEHOLDER
        if text is CANCELLED:
            return "cancelled"

        set_step("write")
        embeds = await self._write_attachments(note, note_path)
        markdown = build_markdown(note, text, embeds, self._clock())
        await self._writer.write(note_path, markdown)
        return "imported"

    async def _generate_streaming(
        self,
        note: ConvertedNote,
        preset: GenerationPreset,
        provider: BaseVisionProvider | None,
        note_path: str,
        token: CancellationToken,
    ) -> JobOutcome:
        now = self._clock()
        await self._writer.write(note_path, build_stream_header(note, now))

        async def on_fragment(fragment: str) -> None:
            if token.cancelled:
                return
            await self._writer.append(note_path, fragment)

        failed = False
        try:
            if provider is None:
                raise RuntimeError(f"no provider available for preset '{preset.label}'")
            await provider.stream_markdown(note, preset.llm_max_width, on_fragment, token)
        except OSError:
            await self._discard_note(note_path)
            raise
        except Exception as e:
            failed = True
            if not token.cancelled:
                logger.warning("Streaming failed for %s: %s", note.source.file_path, e)
                self._notify(f"Ink2MD: generation failed for {note.source.basename}.")

        if token.cancelled:
            logger.info("Stream cancelled, removing partial note %s", note_path)
            await self._discard_note(note_path)
            return "cancelled"

        set_step("write")
        embeds = await self._write_attachments(note, note_path)
        if failed:
            markdown = build_markdown(note, FAILURE_PLACEHOLDER, embeds, now)
            await self._writer.write(note_path, markdown)
        else:
            await self._writer.append(note_path, build_stream_footer(embeds))
        return "imported"

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    async def _write_attachments(self, note: ConvertedNote, note_path: str) -> list[ImageEmbed]:
        folder = posixpath.dirname(note_path)
        for page in note.pages:
            await self._writer.write(join_path(folder, page.file_name), page.data)
        return embeds_for(note)

    async def _discard_note(self, note_path: str) -> None:
        """Unlink a partially streamed note."""
        try:
            if await self._writer.exists(note_path):
                await self._writer.remove(note_path)
        except OSError as e:
            logger.warning("Could not remove partial note %s: %s", note_path, e)

    async def _release_folder(self, allocation: FolderAllocation) -> None:
        """Drop a folder this job created when it ends without outputs."""
        try:
            await self._folders.release(allocation)
        except OSError as e:
            logger.warning("Could not remove unused folder %s: %s", allocation.path, e)

    async def _remember(self, source: Source, freshness: FreshnessResult, folder: str) -> None:
        try:
            await self._evaluator.remember(source, freshness.fingerprint, folder)
        except OSError as e:
            logger.error("Could not update fingerprint cache for %s: %s", source.file_path, e)
