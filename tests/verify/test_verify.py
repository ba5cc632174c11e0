from __future__ import annotations

from pathlib import Path

import pytest
from site_bundler.artifacts import ArtifactKind, ArtifactWriter
from site_bundler.core import ManifestError, ProjectLayout, Settings
from site_bundler.stages.manifest import build_manifest, write_manifest
from site_bundler.stages.sync import sync_document
from site_bundler.stages.verify import verify_build


def _build(site: Path) -> tuple[Settings, ProjectLayout]:
    s = Settings(project_root=site)
    layout = ProjectLayout.from_settings(s)
    w = ArtifactWriter(layout.out_dir)
    arts = {
        ArtifactKind.SCRIPT: w.write(ArtifactKind.SCRIPT, "go();\n"),
        ArtifactKind.STYLE: w.write(ArtifactKind.STYLE, "p{}\n"),
    }
    m = build_manifest(build_id="v1", artifacts=arts, environment="development")
    write_manifest(layout.manifest_json, m)
    for doc in s.documents:
        sync_document(layout.document(doc.path), prefix=doc.prefix, manifest=m)
    return s, layout


def test_consistent_build_passes(site: Path) -> None:
    s, layout = _build(site)
    report = verify_build(layout, s.documents)
    assert report.ok
    assert len(report.checked_assets) == 2
    assert report.checked_documents == ["index.html", "ar/index.html"]


def test_missing_asset_and_stale_document_are_issues(site: Path) -> None:
    s, layout = _build(site)
    m = verify_build(layout, s.documents).manifest

    (layout.out_dir / m.assets.script.filename).unlink()
    (site / "index.html").write_text('<script src="dist/main.js"></script>')

    report = verify_build(layout, s.documents)
    assert not report.ok
    assert any("missing on disk" in i for i in report.issues)
    assert any(i.startswith("index.html does not reference") for i in report.issues)


def test_missing_document_is_only_a_warning(site: Path) -> None:
    s, layout = _build(site)
    (site / "ar" / "index.html").unlink()
    report = verify_build(layout, s.documents)
    assert report.ok
    assert len(report.warnings) == 1


def test_missing_manifest_raises(tmp_path: Path) -> None:
    layout = ProjectLayout.from_settings(Settings(project_root=tmp_path))
    with pytest.raises(ManifestError):
        verify_build(layout, [])
