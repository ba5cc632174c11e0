from __future__ import annotations

from pathlib import Path
from typing import Any

from site_bundler.core import SyncError
from site_bundler.pipeline import BuildContext
from site_bundler.pipeline.events import EventType
from site_bundler.stages.manifest import read_manifest

from .html import sync_document


def stage_sync(ctx: BuildContext) -> dict[str, Any]:
    """
    Point every configured consumer document at the manifest's artifacts.

    Uses the manifest produced earlier in this run, or the one on disk when
    run standalone. A missing document is skipped; any other per-document
    failure is collected and reported once all documents were attempted.
    """
    log = ctx.stage_logger("sync")
    layout = ctx.layout
    manifest = ctx.manifest or read_manifest(layout.manifest_json)

    warnings: list[str] = []
    failures: list[str] = []
    changed: list[str] = []
    replacements = 0

    for doc in ctx.settings.documents:
        path = layout.document(doc.path)
        rel = Path(doc.path).as_posix()
        if not path.is_file():
            warnings.append(f"Consumer document not found, skipped: {rel}")
            ctx.emit(EventType.SYNC_SKIP, stage="sync", document=rel)
            continue

        try:
            res = sync_document(
                path,
                prefix=doc.prefix,
                manifest=manifest,
                out_dir_name=layout.out_dir.name,
                anchor=ctx.settings.version_anchor,
            )
        except (OSError, UnicodeDecodeError) as e:
            failures.append(f"{rel}: {e}")
            continue

        warnings.extend(res.warnings)
        replacements += sum(res.replacements.values())
        if res.changed:
            changed.append(rel)
        ctx.emit(
            EventType.SYNC_DOCUMENT,
            stage="sync",
            document=rel,
            changed=res.changed,
            replacements=res.replacements,
            version_meta=res.version_meta,
        )

    if failures:
        for w in warnings:
            log.warning(w)
        raise SyncError(
            f"Could not synchronise {len(failures)} document(s): " + "; ".join(failures)
        )

    return {
        "version": manifest.version,
        "changed": changed,
        "_warnings": warnings,
        "_metrics": {"documents_changed": len(changed), "replacements": replacements},
    }
