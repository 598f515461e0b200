# src/storage/local_writer.py — v3
"""Local filesystem output writer (default backend).

Full writes go through a temporary sibling file and ``os.replace`` so a
note is never observed half-written.
"""

from __future__ import annotations

import asyncio
import os
import shutil
import tempfile
from pathlib import Path

from ink2md.storage.base_output_writer import BaseOutputWriter


class LocalWriter(BaseOutputWriter):
    """Write outputs to the local filesystem."""

    def __init__(self, base_path: str | Path | None = None) -> None:
        """Initialize with optional base path.

        Args:
            base_path: Root directory for all writes. If None, paths are absolute.
        """
        self._base = Path(base_path) if base_path else None

    @property
    def base_path(self) -> Path | None:
        return self._base

    def _resolve(self, path: str) -> Path:
        """Resolve a path relative to base_path."""
        if self._base is not None:
            return self._base / path
        return Path(path)

    async def write(self, path: str, content: bytes | str) -> None:
        """Atomically write content to a local file path."""
        await asyncio.to_thread(self._write_atomic, self._resolve(path), content)

    @staticmethod
    def _write_atomic(p: Path, content: bytes | str) -> None:
        p.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8") if isinstance(content, str) else content
        fd, tmp = tempfile.mkstemp(dir=p.parent, prefix=f".{p.name}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as f:
                f.write(data)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp, p)
        except BaseException:
            Path(tmp).unlink(missing_ok=True)
            raise

    async def append(self, path: str, content: str) -> None:
        """Append text to a local file."""
        p = self._resolve(path)
        p.parent.mkdir(parents=True, exist_ok=True)
        with p.open("a", encoding="utf-8") as f:
            f.write(content)

    async def read(self, path: str) -> bytes:
        """Read content from a local file path."""
        return self._resolve(path).read_bytes()

    async def exists(self, path: str) -> bool:
        """Check if a local path exists."""
        return self._resolve(path).exists()

    async def is_dir(self, path: str) -> bool:
        return self._resolve(path).is_dir()

    async def mkdir(self, path: str) -> None:
        self._resolve(path).mkdir(parents=True, exist_ok=True)

    async def remove(self, path: str) -> None:
        self._resolve(path).unlink()

    async def rmdir(self, path: str) -> None:
        self._resolve(path).rmdir()

    async def list_dir(self, path: str) -> list[str]:
        """List directory contents."""
        p = self._resolve(path)
        if not p.is_dir():
            return []
        return [entry.name for entry in sorted(p.iterdir())]

    async def remove_tree(self, path: str) -> None:
        await asyncio.to_thread(shutil.rmtree, self._resolve(path))
