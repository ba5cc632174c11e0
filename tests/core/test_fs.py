from __future__ import annotations

from pathlib import Path

from site_bundler.core import fs


def test_atomic_write_text_and_bytes_roundtrip(tmp_path: Path) -> None:
    text_path = tmp_path / "d1" / "sample.txt"
    fs.atomic_write_text(text_path, "hello\n")
    assert text_path.read_text() == "hello\n"

    fs.atomic_write_text(text_path, "updated")
    assert text_path.read_text() == "updated"

    bytes_path = tmp_path / "d2" / "sample.bin"
    fs.atomic_write_bytes(bytes_path, b"\x00\x01")
    assert bytes_path.read_bytes() == b"\x00\x01"

    # no temp files left behind
    assert [p.name for p in (tmp_path / "d1").iterdir()] == ["sample.txt"]


def test_relpath_posix(tmp_path: Path) -> None:
    assert fs.relpath_posix(tmp_path / "b" / "file.txt", tmp_path) == "b/file.txt"
    assert fs.relpath_posix(Path("/elsewhere/x.js"), tmp_path) == "/elsewhere/x.js"


def test_probe_writable_dir_creates_directory(tmp_path: Path) -> None:
    out = tmp_path / "dist" / "nested"
    fs.probe_writable_dir(out)
    assert out.is_dir()
    assert list(out.iterdir()) == []
