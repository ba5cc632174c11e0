from __future__ import annotations

import os
from pathlib import Path

import pytest
from site_bundler.artifacts import NAMING, ArtifactKind
from site_bundler.stages.prune import prune_artifacts, retention_set


def _touch(path: Path, mtime: int) -> Path:
    path.write_text(path.name, encoding="utf-8")
    os.utime(path, (mtime, mtime))
    return path


def test_keeps_newest_per_kind(tmp_path: Path) -> None:
    for i in range(5):
        _touch(tmp_path / f"main.{i:010d}.js", 1_000 + i)
    for i in range(2):
        _touch(tmp_path / f"style.{i:010d}.css", 1_000 + i)
    # never touched: not hashed, or other files
    _touch(tmp_path / "main.js", 1)
    _touch(tmp_path / "build-manifest.json", 1)
    _touch(tmp_path / "main.0000000000.js.map", 1)

    res = prune_artifacts(tmp_path, keep=3)

    assert res.kept["script"] == [
        "main.0000000004.js",
        "main.0000000003.js",
        "main.0000000002.js",
    ]
    assert sorted(res.removed["script"]) == ["main.0000000000.js", "main.0000000001.js"]
    assert res.removed["style"] == []
    assert res.removed_count == 2
    assert res.warnings == []

    left = sorted(p.name for p in tmp_path.iterdir())
    assert left == [
        "build-manifest.json",
        "main.0000000000.js.map",
        "main.0000000002.js",
        "main.0000000003.js",
        "main.0000000004.js",
        "main.js",
        "style.0000000000.css",
        "style.0000000001.css",
    ]


def test_keep_zero_removes_everything(tmp_path: Path) -> None:
    _touch(tmp_path / "main.aaaaaaaaaa.js", 10)
    res = prune_artifacts(tmp_path, keep=0)
    assert res.removed["script"] == ["main.aaaaaaaaaa.js"]
    assert list(tmp_path.iterdir()) == []


def test_equal_mtimes_tiebreak_by_name(tmp_path: Path) -> None:
    for name in ("main.aaaaaaaaaa.js", "main.bbbbbbbbbb.js", "main.cccccccccc.js"):
        _touch(tmp_path / name, 50)
    warnings: list[str] = []
    files = retention_set(tmp_path, NAMING[ArtifactKind.SCRIPT].pattern(), warnings)
    assert [f.path.name for f in files] == [
        "main.cccccccccc.js",
        "main.bbbbbbbbbb.js",
        "main.aaaaaaaaaa.js",
    ]


def test_missing_dir_and_negative_keep(tmp_path: Path) -> None:
    res = prune_artifacts(tmp_path / "nope", keep=3)
    assert res.removed_count == 0
    assert len(res.warnings) == 1

    with pytest.raises(ValueError):
        prune_artifacts(tmp_path, keep=-1)


def test_unlink_failure_is_a_warning_and_pruning_continues(
    tmp_path: Path, monkeypatch
) -> None:
    for i in range(3):
        _touch(tmp_path / f"main.{i:010d}.js", 1_000 + i)
    _touch(tmp_path / "style.0000000000.css", 1_000)
    _touch(tmp_path / "style.0000000001.css", 1_001)

    real_unlink = Path.unlink

    def _unlink(self: Path, missing_ok: bool = False) -> None:
        if self.name == "main.0000000000.js":
            raise PermissionError(13, "Permission denied")
        real_unlink(self, missing_ok=missing_ok)

    monkeypatch.setattr(Path, "unlink", _unlink)
    res = prune_artifacts(tmp_path, keep=1)

    assert res.removed["script"] == ["main.0000000001.js"]
    assert res.removed["style"] == ["style.0000000000.css"]
    assert len(res.warnings) == 1
    assert "main.0000000000.js" in res.warnings[0]
    assert (tmp_path / "main.0000000000.js").exists()


def test_stat_failure_leaves_file_out_of_retention(
    tmp_path: Path, monkeypatch
) -> None:
    _touch(tmp_path / "main.aaaaaaaaaa.js", 10)
    _touch(tmp_path / "main.bbbbbbbbbb.js", 20)

    real_stat = Path.stat

    def _stat(self: Path, *args, **kwargs):
        if self.name == "main.aaaaaaaaaa.js":
            raise PermissionError(13, "Permission denied")
        return real_stat(self, *args, **kwargs)

    monkeypatch.setattr(Path, "stat", _stat)
    res = prune_artifacts(tmp_path, keep=0)

    assert res.removed["script"] == ["main.bbbbbbbbbb.js"]
    assert any("main.aaaaaaaaaa.js" in w for w in res.warnings)
    assert (tmp_path / "main.aaaaaaaaaa.js").exists()
