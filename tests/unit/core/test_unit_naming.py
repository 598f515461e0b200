# tests/unit/core/test_unit_naming.py — v1
"""Tests for core/naming.py — slugs, stable ids, relative folders."""

from __future__ import annotations

import re

from ink2md.core.naming import create_stable_id, relative_folder, slugify_file_path


class TestSlugify:
    def test_lowercases_and_strips_extension(self):
        assert slugify_file_path("/notes/Meeting Notes.PDF") == "meeting-notes"

    def test_collapses_symbols(self):
        assert slugify_file_path("/x/__Plan (v2)!!.png") == "plan-v2"

    def test_falls_back_to_note(self):
        assert slugify_file_path("/x/###.note") == "note"

    def test_windows_separators(self):
        assert slugify_file_path("C:\\inbox\\Daily.jpg") == "daily"


class TestStableId:
    def test_format(self):
        sid = create_stable_id("/notes/a.pdf", "cfg1")
        assert re.fullmatch(r"a-[0-9a-f]{8}", sid)

    def test_deterministic(self):
        assert create_stable_id("/notes/a.pdf", "cfg1") == create_stable_id("/notes/a.pdf", "cfg1")

    def test_scope_isolates_same_path(self):
        assert create_stable_id("/notes/a.pdf", "cfg1") != create_stable_id("/notes/a.pdf", "cfg2")

    def test_different_paths_differ(self):
        assert create_stable_id("/notes/a.pdf", "c") != create_stable_id("/other/a.pdf", "c")


class TestRelativeFolder:
    def test_nested(self):
        assert relative_folder("/in", "/in/work/2024/a.pdf") == "work/2024"

    def test_directly_under_root(self):
        assert relative_folder("/in", "/in/a.pdf") == ""

    def test_outside_root(self):
        assert relative_folder("/in", "/elsewhere/a.pdf") == ""
