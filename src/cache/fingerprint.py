# src/cache/fingerprint.py — v3
"""Content fingerprinting for source files.

A SHA-256 digest over the raw bytes, streamed in fixed-size blocks so large
PDFs and notebooks are never loaded whole. Reading and hashing failures are
reported as distinct exception types.
"""

from __future__ import annotations

import asyncio
import hashlib
import os
from dataclasses import dataclass
from pathlib import Path

_BLOCK_SIZE = 1024 * 1024


class FingerprintReadError(OSError):
    """The file could not be opened or read."""


class FingerprintHashError(RuntimeError):
    """The digest could not be computed from bytes that were read."""


@dataclass(frozen=True)
class FileStat:
    """Size and modification time observed for a file."""

    size: int
    mtime_ms: float


def stat_file(path: str | Path) -> FileStat:
    """Stat a file. Raises OSError when it cannot be accessed."""
    st = os.stat(path)
    return FileStat(size=st.st_size, mtime_ms=st.st_mtime_ns / 1_000_000)


def compute_digest(path: str | Path) -> str:
    """Compute the SHA-256 hex digest of a file's bytes.

    Raises:
        FingerprintReadError: If the file cannot be read.
        FingerprintHashError: If hashing fails.
    """
    hasher = hashlib.sha256()
    try:
        handle = open(path, "rb")  # noqa: SIM115
    except OSError as e:
        raise FingerprintReadError(f"Cannot open {path}: {e}") from e

    with handle:
        while True:
            try:
                block = handle.read(_BLOCK_SIZE)
            except OSError as e:
                raise FingerprintReadError(f"Cannot read {path}: {e}") from e
            if not block:
                break
            try:
                hasher.update(block)
            except (TypeError, ValueError) as e:
                raise FingerprintHashError(f"Cannot hash {path}: {e}") from e

    return hasher.hexdigest()


async def compute_digest_async(path: str | Path) -> str:
    """compute_digest off the event loop."""
    return await asyncio.to_thread(compute_digest, path)


async def stat_file_async(path: str | Path) -> FileStat:
    """stat_file off the event loop."""
    return await asyncio.to_thread(stat_file, path)
