from __future__ import annotations

from typing import Any

from site_bundler.artifacts import ArtifactKind, ArtifactWriter
from site_bundler.core import StyleError
from site_bundler.pipeline import BuildContext
from site_bundler.pipeline.events import EventType

from .aggregator import resolve_style_source


def stage_styles(ctx: BuildContext) -> dict[str, Any]:
    layout = ctx.layout
    try:
        res = resolve_style_source(layout)
    except (OSError, UnicodeDecodeError) as e:
        raise StyleError(f"Could not read stylesheet: {e}") from e

    if res is None:
        ctx.emit(EventType.STYLES_SKIPPED, stage="styles")
        return {
            "skipped": True,
            "_warnings": [
                "No stylesheet found "
                f"({layout.styles_root}, {layout.legacy_style}, "
                f"{layout.existing_style_output()}); styles skipped"
            ],
        }

    try:
        artifact = ArtifactWriter(layout.out_dir).write(ArtifactKind.STYLE, res.content)
    except OSError as e:
        raise StyleError(f"Could not write style artifact: {e}") from e

    ref = ctx.record_artifact(stage="styles", artifact=artifact)
    ctx.emit(
        EventType.STYLES_RESOLVED,
        stage="styles",
        source=str(res.source),
        source_kind=res.kind.value,
        imports=len(res.included),
    )

    return {
        "filename": artifact.filename,
        "source": str(res.source),
        "source_kind": res.kind.value,
        "_warnings": res.warnings,
        "_artifacts": [ref],
        "_metrics": {"imports": len(res.included), "bytes": ref.bytes},
    }
