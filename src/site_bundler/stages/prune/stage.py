from __future__ import annotations

from typing import Any

from site_bundler.pipeline import BuildContext
from site_bundler.pipeline.events import EventType

from .pruner import prune_artifacts


def stage_prune(ctx: BuildContext) -> dict[str, Any]:
    keep = ctx.settings.keep_asset_versions
    res = prune_artifacts(ctx.layout.out_dir, keep=keep)

    ctx.emit(
        EventType.PRUNE_FINISH,
        stage="prune",
        keep=keep,
        removed=res.removed,
    )

    return {
        "keep": keep,
        "kept": res.kept,
        "removed": res.removed,
        "_warnings": res.warnings,
        "_metrics": {"removed": res.removed_count},
    }
