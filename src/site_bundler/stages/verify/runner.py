from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Sequence

import structlog
from site_bundler.core import ConsumerDocument, ProjectLayout
from site_bundler.stages.manifest import BuildManifest, read_manifest

log = structlog.get_logger(__name__)


@dataclass(slots=True)
class VerifyReport:
    manifest: BuildManifest
    checked_assets: list[str] = field(default_factory=list)
    checked_documents: list[str] = field(default_factory=list)
    issues: list[str] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.issues


def verify_build(
    layout: ProjectLayout, documents: Sequence[ConsumerDocument]
) -> VerifyReport:
    """
    Check that every asset in the manifest exists in the output directory and
    that every existing consumer document references each of them.

    Raises ManifestError when the manifest itself is missing or invalid.
    """
    manifest = read_manifest(layout.manifest_json)
    report = VerifyReport(manifest=manifest)

    filenames: list[str] = []
    for kind in ("script", "style"):
        entry = manifest.assets.get(kind)
        if entry is None:
            continue
        filenames.append(entry.filename)
        if (layout.out_dir / entry.filename).is_file():
            report.checked_assets.append(entry.filename)
        else:
            report.issues.append(f"{kind} asset missing on disk: {entry.filename}")

    for doc in documents:
        path = layout.document(doc.path)
        if not path.is_file():
            report.warnings.append(f"Consumer document not found, skipped: {doc.path}")
            continue
        html = path.read_text(encoding="utf-8")
        for filename in filenames:
            if f"{doc.prefix}{filename}" not in html:
                report.issues.append(
                    f"{Path(doc.path).as_posix()} does not reference {doc.prefix}{filename}"
                )
        report.checked_documents.append(Path(doc.path).as_posix())

    log.debug(
        "verify.done",
        assets=len(report.checked_assets),
        documents=len(report.checked_documents),
        issues=len(report.issues),
    )
    return report
