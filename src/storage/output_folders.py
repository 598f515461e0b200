# src/storage/output_folders.py — v2
"""Output Folder Manager: resolve, create, reuse or clear a note's folder.

Layout: ``<output_folder>/<relative folder of the source>/<basename>``,
with ``-2``, ``-3``... suffixes when the conflict policy keeps both.
"""

from __future__ import annotations

import logging
import posixpath
from dataclasses import dataclass

from ink2md.config.sources import SourceConfig
from ink2md.core.models import Source
from ink2md.storage.base_output_writer import BaseOutputWriter

logger = logging.getLogger(__name__)


def join_path(*parts: str) -> str:
    """Join posix path parts, dropping empty segments and stray slashes."""
    cleaned = [p.strip("/") for p in parts if p and p.strip("/")]
    return posixpath.normpath("/".join(cleaned)) if cleaned else ""


@dataclass(frozen=True)
class FolderAllocation:
    """Destination folder of one job; ``created`` is False for reused folders."""

    path: str
    created: bool


class OutputFolderManager:
    """Allocates one destination folder per imported note."""

    def __init__(self, writer: BaseOutputWriter) -> None:
        self._writer = writer

    async def ensure_folder(
        self,
        source: Source,
        config: SourceConfig,
        reuse_hint: str | None = None,
    ) -> FolderAllocation:
        """Resolve the folder the note for ``source`` should be written to."""
        replace = config.conflict_policy == "replace"

        if reuse_hint and await self._writer.is_dir(reuse_hint):
            if replace:
                await self.clear_folder(reuse_hint)
            logger.debug("Reusing output folder %s", reuse_hint)
            return FolderAllocation(reuse_hint, created=False)

        base = join_path(config.output_folder, source.relative_folder)
        if base:
            await self._writer.mkdir(base)

        counter = 1
        candidate = join_path(base, source.basename)
        while await self._writer.exists(candidate):
            if replace:
                await self.clear_folder(candidate)
                return FolderAllocation(candidate, created=False)
            counter += 1
            candidate = join_path(base, f"{source.basename}-{counter}")

        await self._writer.mkdir(candidate)
        return FolderAllocation(candidate, created=True)

    async def release(self, allocation: FolderAllocation) -> bool:
        """Remove a folder this job created if nothing was written into it.

        Returns True when the folder was removed.
        """
        if not allocation.created or not await self._writer.is_dir(allocation.path):
            return False
        if await self._writer.list_dir(allocation.path):
            return False
        await self._writer.rmdir(allocation.path)
        logger.debug("Removed unused output folder %s", allocation.path)
        return True

    async def clear_folder(self, path: str) -> None:
        """Delete ``path`` recursively, then recreate it empty."""
        try:
            await self._writer.remove_tree(path)
        except NotImplementedError:
            logger.debug("Bulk delete unavailable, removing %s entry by entry", path)
            await self._remove_entries(path)
        await self._writer.mkdir(path)

    async def _remove_entries(self, path: str) -> None:
        if not await self._writer.is_dir(path):
            if await self._writer.exists(path):
                await self._writer.remove(path)
            return
        for name in await self._writer.list_dir(path):
            child = join_path(path, name)
            if await self._writer.is_dir(child):
                await self._remove_entries(child)
            else:
                await self._writer.remove(child)
        await self._writer.rmdir(path)
