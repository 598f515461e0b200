# src/storage/base_output_writer.py — v2
"""Abstract output writer interface.

Paths are posix strings relative to the writer's root (the vault).
"""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseOutputWriter(ABC):
    """Unified interface for output storage backends."""

    @abstractmethod
    async def write(self, path: str, content: bytes | str) -> None:
        """Write content to the given path, replacing it atomically."""

    @abstractmethod
    async def append(self, path: str, content: str) -> None:
        """Append text to the given path, creating it if needed."""

    @abstractmethod
    async def read(self, path: str) -> bytes:
        """Read content from the given path."""

    @abstractmethod
    async def exists(self, path: str) -> bool:
        """Check if path exists."""

    @abstractmethod
    async def is_dir(self, path: str) -> bool:
        """Check if path is an existing directory."""

    @abstractmethod
    async def mkdir(self, path: str) -> None:
        """Create a directory and any missing parents."""

    @abstractmethod
    async def remove(self, path: str) -> None:
        """Delete a single file."""

    @abstractmethod
    async def rmdir(self, path: str) -> None:
        """Delete an empty directory."""

    @abstractmethod
    async def list_dir(self, path: str) -> list[str]:
        """List entry names of a directory (empty when missing)."""

    async def remove_tree(self, path: str) -> None:
        """Recursively delete a directory in one operation.

        Optional: backends without a bulk delete raise NotImplementedError
        and callers fall back to deleting entries one by one.
        """
        raise NotImplementedError
