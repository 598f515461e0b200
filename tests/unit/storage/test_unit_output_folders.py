# tests/unit/storage/test_unit_output_folders.py — v2
"""Tests for storage/output_folders.py — reuse, replace, keep-both, fallback, release."""

from __future__ import annotations

import pytest

from ink2md.config.sources import SourceConfig
from ink2md.storage.local_writer import LocalWriter
from ink2md.storage.output_folders import FolderAllocation, OutputFolderManager, join_path


class NoBulkDeleteWriter(LocalWriter):
    """Local writer without the optional recursive delete."""

    async def remove_tree(self, path: str) -> None:
        raise NotImplementedError


@pytest.fixture
def vault(tmp_path):
    v = tmp_path / "vault"
    v.mkdir()
    return v


@pytest.fixture
def manager(vault):
    return OutputFolderManager(LocalWriter(vault))


@pytest.fixture
def source(make_source):
    return make_source("/in/notes/a.pdf", root="/in", relative_folder="notes")


def _cfg(replace: bool) -> SourceConfig:
    return SourceConfig(id="cfg1", output_folder="Ink2MD", replace_existing=replace)


class TestJoinPath:
    def test_drops_empty_and_slashes(self):
        assert join_path("Ink2MD/", "", "/notes", "a") == "Ink2MD/notes/a"

    def test_all_empty(self):
        assert join_path("", "") == ""


class TestEnsureFolder:
    @pytest.mark.asyncio
    async def test_mirrors_relative_folder(self, manager, vault, source):
        allocation = await manager.ensure_folder(source, _cfg(False))
        assert allocation == FolderAllocation("Ink2MD/notes/a", created=True)
        assert (vault / "Ink2MD/notes/a").is_dir()

    @pytest.mark.asyncio
    async def test_keep_both_appends_suffix(self, manager, vault, source):
        paths = [(await manager.ensure_folder(source, _cfg(False))).path for _ in range(3)]
        assert paths == ["Ink2MD/notes/a", "Ink2MD/notes/a-2", "Ink2MD/notes/a-3"]

    @pytest.mark.asyncio
    async def test_replace_clears_existing_candidate(self, manager, vault, source):
        (vault / "Ink2MD/notes/a/sub").mkdir(parents=True)
        (vault / "Ink2MD/notes/a/old.md").write_text("old")
        allocation = await manager.ensure_folder(source, _cfg(True))
        assert allocation == FolderAllocation("Ink2MD/notes/a", created=False)
        assert list((vault / allocation.path).iterdir()) == []

    @pytest.mark.asyncio
    async def test_reuse_hint_replace_clears_that_folder(self, manager, vault, source):
        (vault / "Elsewhere/a-7").mkdir(parents=True)
        (vault / "Elsewhere/a-7/old.png").write_bytes(b"x")
        allocation = await manager.ensure_folder(source, _cfg(True), reuse_hint="Elsewhere/a-7")
        assert allocation == FolderAllocation("Elsewhere/a-7", created=False)
        assert list((vault / allocation.path).iterdir()) == []
        assert not (vault / "Ink2MD/notes/a-2").exists()

    @pytest.mark.asyncio
    async def test_reuse_hint_keep_both_keeps_contents(self, manager, vault, source):
        (vault / "Ink2MD/notes/a").mkdir(parents=True)
        (vault / "Ink2MD/notes/a/a.md").write_text("prev")
        allocation = await manager.ensure_folder(source, _cfg(False), reuse_hint="Ink2MD/notes/a")
        assert allocation.path == "Ink2MD/notes/a"
        assert (vault / "Ink2MD/notes/a/a.md").read_text() == "prev"

    @pytest.mark.asyncio
    async def test_stale_reuse_hint_ignored(self, manager, source):
        allocation = await manager.ensure_folder(source, _cfg(True), reuse_hint="Gone/a")
        assert allocation.path == "Ink2MD/notes/a"


class TestRelease:
    @pytest.mark.asyncio
    async def test_removes_new_empty_folder(self, manager, vault, source):
        allocation = await manager.ensure_folder(source, _cfg(False))
        assert await manager.release(allocation) is True
        assert not (vault / "Ink2MD/notes/a").exists()
        # The next allocation gets the unsuffixed name again.
        assert (await manager.ensure_folder(source, _cfg(False))).path == "Ink2MD/notes/a"

    @pytest.mark.asyncio
    async def test_keeps_folder_with_contents(self, manager, vault, source):
        allocation = await manager.ensure_folder(source, _cfg(False))
        (vault / allocation.path / "a-page-1.png").write_bytes(b"x")
        assert await manager.release(allocation) is False
        assert (vault / allocation.path).is_dir()

    @pytest.mark.asyncio
    async def test_keeps_reused_folder(self, manager, vault, source):
        (vault / "Ink2MD/notes/a").mkdir(parents=True)
        allocation = await manager.ensure_folder(source, _cfg(True), reuse_hint="Ink2MD/notes/a")
        assert await manager.release(allocation) is False
        assert (vault / "Ink2MD/notes/a").is_dir()


class TestClearFolder:
    @pytest.mark.asyncio
    async def test_fallback_without_bulk_delete(self, vault):
        (vault / "f/deep/er").mkdir(parents=True)
        (vault / "f/deep/er/x.png").write_bytes(b"x")
        (vault / "f/a.md").write_text("a")
        manager = OutputFolderManager(NoBulkDeleteWriter(vault))
        await manager.clear_folder("f")
        assert (vault / "f").is_dir()
        assert list((vault / "f").iterdir()) == []
