# tests/unit/cache/test_unit_fingerprint.py — v1
"""Tests for cache/fingerprint.py — digest and stat helpers."""

from __future__ import annotations

import hashlib
import os

import pytest

from ink2md.cache.fingerprint import (
    FingerprintReadError,
    compute_digest,
    compute_digest_async,
    stat_file,
    stat_file_async,
)


class TestComputeDigest:
    def test_matches_sha256(self, tmp_path):
        f = tmp_path / "a.pdf"
        f.write_bytes(b"hello ink")
        assert compute_digest(f) == hashlib.sha256(b"hello ink").hexdigest()

    def test_stable_across_calls(self, tmp_path):
        f = tmp_path / "a.pdf"
        f.write_bytes(os.urandom(3 * 1024 * 1024 + 17))
        assert compute_digest(f) == compute_digest(f)

    def test_content_change_changes_digest(self, tmp_path):
        f = tmp_path / "a.pdf"
        f.write_bytes(b"one")
        first = compute_digest(f)
        f.write_bytes(b"two")
        assert compute_digest(f) != first

    def test_missing_file_is_read_error(self, tmp_path):
        with pytest.raises(FingerprintReadError):
            compute_digest(tmp_path / "missing.pdf")

    def test_read_error_is_oserror(self):
        assert issubclass(FingerprintReadError, OSError)

    @pytest.mark.asyncio
    async def test_async_wrapper(self, tmp_path):
        f = tmp_path / "a.pdf"
        f.write_bytes(b"x")
        assert await compute_digest_async(f) == compute_digest(f)


class TestStatFile:
    def test_size_and_mtime(self, tmp_path):
        f = tmp_path / "a.pdf"
        f.write_bytes(b"12345")
        os.utime(f, ns=(1_700_000_000_000_000_000, 1_700_000_000_123_000_000))
        st = stat_file(f)
        assert st.size == 5
        assert st.mtime_ms == pytest.approx(1_700_000_000_123.0)

    def test_missing_raises_oserror(self, tmp_path):
        with pytest.raises(OSError):
            stat_file(tmp_path / "missing")

    @pytest.mark.asyncio
    async def test_async_wrapper(self, tmp_path):
        f = tmp_path / "a.pdf"
        f.write_bytes(b"abc")
        assert (await stat_file_async(f)).size == 3
