from __future__ import annotations

from typing import TypedDict

from site_bundler.pipeline import BuildContext
from site_bundler.pipeline.events import EventType

from .manifest import build_manifest, write_manifest


class StageManifestResult(TypedDict):
    manifest_path: str
    version: str
    assets: list[str]


def stage_manifest(ctx: BuildContext) -> StageManifestResult:
    manifest = build_manifest(
        build_id=ctx.build_id,
        artifacts=ctx.artifacts,
        environment="production" if ctx.production else "development",
    )
    write_manifest(ctx.layout.manifest_json, manifest)
    ctx.manifest = manifest

    ctx.emit(
        EventType.MANIFEST_WRITTEN,
        stage="manifest",
        path=str(ctx.layout.manifest_json),
        version=manifest.version,
    )

    return {
        "manifest_path": str(ctx.layout.manifest_json),
        "version": manifest.version,
        "assets": sorted(k.value for k in ctx.artifacts),
    }
