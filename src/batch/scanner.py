# src/batch/scanner.py — v2
"""Source discovery — directory scanning and format detection.

Walks the watch directories of one source configuration and returns the
supported files as Source objects. Pure listing: no side effects.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from ink2md.config.sources import SourceConfig
from ink2md.core.models import InputFormat, Source
from ink2md.core.naming import create_stable_id, relative_folder, slugify_file_path

logger = logging.getLogger(__name__)

# Supported file extensions mapped to format names
SUPPORTED_FORMATS: dict[str, InputFormat] = {
    ".png": "image",
    ".jpg": "image",
    ".jpeg": "image",
    ".webp": "image",
    ".pdf": "pdf",
    ".note": "supernote",
}

# Collection order within one directory
_FORMAT_ORDER: tuple[InputFormat, ...] = ("image", "pdf", "supernote")


class SourceScanner:
    """Discover importable files for a source configuration.

    Workflow:
        1. Keep only configured directories that exist
        2. For each directory, list files (recursively if enabled)
        3. Group by enabled format: images, then PDFs, then notebooks
    """

    def discover(self, config: SourceConfig) -> list[Source]:
        """Return every supported file under the configuration's directories."""
        enabled = self._enabled_formats(config)
        sources: list[Source] = []

        for directory in config.directories:
            root = Path(directory).expanduser()
            if not root.is_dir():
                logger.warning("Skipping missing input directory %s (%s)", root, config.label)
                continue

            files = self.scan(root, recursive=config.recursive)
            for fmt in _FORMAT_ORDER:
                if fmt not in enabled:
                    continue
                for path in files:
                    if SUPPORTED_FORMATS[path.suffix.lower()] == fmt:
                        sources.append(self._to_source(path, root, fmt, config.id))

        logger.info(
            "Discovered %d sources for %s (recursive=%s)",
            len(sources), config.label, config.recursive,
        )
        return sources

    def scan(self, root: Path, recursive: bool = True) -> list[Path]:
        """List supported files under ``root`` sorted by path.

        Unreadable subdirectories are logged and skipped.
        """
        matches: list[Path] = []

        def _on_error(err: OSError) -> None:
            logger.warning("Unable to read directory %s: %s", err.filename, err)

        for dirpath, dirnames, filenames in os.walk(root, onerror=_on_error):
            if not recursive:
                dirnames.clear()
            for name in filenames:
                if Path(name).suffix.lower() in SUPPORTED_FORMATS:
                    matches.append(Path(dirpath) / name)

        return sorted(matches)

    @staticmethod
    def _enabled_formats(config: SourceConfig) -> set[InputFormat]:
        enabled: set[InputFormat] = set()
        if config.include_images:
            enabled.add("image")
        if config.include_pdfs:
            enabled.add("pdf")
        if config.include_supernote:
            enabled.add("supernote")
        return enabled

    @staticmethod
    def _to_source(path: Path, root: Path, fmt: InputFormat, config_id: str) -> Source:
        file_path = str(path.resolve())
        input_root = str(root.resolve())
        return Source(
            id=create_stable_id(file_path, config_id),
            source_config_id=config_id,
            format=fmt,
            file_path=file_path,
            basename=slugify_file_path(file_path),
            input_root=input_root,
            relative_folder=relative_folder(input_root, file_path),
        )


def discover(config: SourceConfig) -> list[Source]:
    """Discover sources with a default scanner."""
    return SourceScanner().discover(config)
