from __future__ import annotations

from typing import Any

from site_bundler.artifacts import ArtifactKind, ArtifactWriter
from site_bundler.core import BundleError, Timer
from site_bundler.pipeline import BuildContext
from site_bundler.pipeline.events import EventType

from .emitter import emit_bundle
from .minify import minify_js


def _script_source(ctx: BuildContext) -> str:
    if ctx.graph is not None:
        return emit_bundle(ctx.graph)
    if ctx.legacy_script is not None:
        return ctx.legacy_script.read_text(encoding="utf-8")
    raise BundleError("Nothing to bundle: graph stage produced no module graph")


def stage_bundle(ctx: BuildContext) -> dict[str, Any]:
    log = ctx.stage_logger("bundle")

    with Timer() as t:
        try:
            code = _script_source(ctx)
        except (OSError, UnicodeDecodeError) as e:
            raise BundleError(f"Could not read script source: {e}") from e

        emitted_bytes = len(code.encode("utf-8"))
        if ctx.production:
            code = minify_js(code)
            log.debug(
                "Minified bundle",
                before=emitted_bytes,
                after=len(code.encode("utf-8")),
            )

    try:
        artifact = ArtifactWriter(ctx.layout.out_dir).write(ArtifactKind.SCRIPT, code)
    except OSError as e:
        raise BundleError(f"Could not write script artifact: {e}") from e

    ref = ctx.record_artifact(stage="bundle", artifact=artifact)
    ctx.emit(
        EventType.BUNDLE_EMITTED,
        stage="bundle",
        filename=artifact.filename,
        modules=len(ctx.graph) if ctx.graph is not None else 0,
        legacy=ctx.graph is None,
    )

    return {
        "filename": artifact.filename,
        "hash": artifact.hash,
        "_artifacts": [ref],
        "_metrics": {
            "emitted_bytes": emitted_bytes,
            "bytes": ref.bytes,
            "emit_ms": t.duration_ms or 0,
        },
    }
