# tests/unit/batch/test_unit_scanner.py — v2
"""Tests for batch/scanner.py — source discovery."""

from __future__ import annotations

from ink2md.batch.scanner import SUPPORTED_FORMATS, SourceScanner, discover
from ink2md.config.sources import SourceConfig
from ink2md.core.naming import create_stable_id


def _touch(path, data=b"x"):
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(data)
    return path


class TestSupportedFormats:
    def test_extensions(self):
        assert SUPPORTED_FORMATS[".jpeg"] == "image"
        assert SUPPORTED_FORMATS[".pdf"] == "pdf"
        assert SUPPORTED_FORMATS[".note"] == "supernote"
        assert ".txt" not in SUPPORTED_FORMATS


class TestDiscover:
    def test_format_order_then_path(self, input_dir, source_config):
        _touch(input_dir / "b.pdf")
        _touch(input_dir / "z.png")
        _touch(input_dir / "a.note")
        _touch(input_dir / "a.pdf")
        _touch(input_dir / "readme.txt")

        sources = discover(source_config)
        names = [s.file_path.rsplit("/", 1)[-1] for s in sources]
        assert names == ["z.png", "a.pdf", "b.pdf", "a.note"]
        assert [s.format for s in sources] == ["image", "pdf", "pdf", "supernote"]

    def test_recursive_mirrors_relative_folder(self, input_dir, source_config):
        _touch(input_dir / "work" / "2024" / "Plan.PDF")
        (source,) = discover(source_config)
        assert source.relative_folder == "work/2024"
        assert source.basename == "plan"
        assert source.input_root == str(input_dir.resolve())

    def test_non_recursive(self, input_dir, source_config):
        _touch(input_dir / "top.pdf")
        _touch(input_dir / "sub" / "deep.pdf")
        cfg = source_config.model_copy(update={"recursive": False})
        assert [s.basename for s in discover(cfg)] == ["top"]

    def test_format_toggles(self, input_dir, source_config):
        _touch(input_dir / "a.png")
        _touch(input_dir / "b.pdf")
        cfg = source_config.model_copy(update={"include_images": False})
        assert [s.format for s in discover(cfg)] == ["pdf"]

    def test_missing_directory_skipped(self, tmp_path, input_dir, source_config):
        _touch(input_dir / "a.pdf")
        cfg = source_config.model_copy(
            update={"directories": (str(tmp_path / "missing"), str(input_dir))}
        )
        assert len(discover(cfg)) == 1

    def test_id_scoped_by_config(self, input_dir, source_config):
        f = _touch(input_dir / "a.pdf")
        (source,) = SourceScanner().discover(source_config)
        assert source.id == create_stable_id(str(f.resolve()), "cfg1")
        assert source.source_config_id == "cfg1"

    def test_same_path_two_configs(self, input_dir, source_config):
        _touch(input_dir / "a.pdf")
        other = SourceConfig(id="cfg2", directories=(str(input_dir),))
        (a,) = discover(source_config)
        (b,) = discover(other)
        assert a.file_path == b.file_path
        assert a.id != b.id
