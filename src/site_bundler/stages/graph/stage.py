from __future__ import annotations

from typing import TypedDict

from site_bundler.core import EntryModuleError
from site_bundler.pipeline import BuildContext
from site_bundler.pipeline.events import EventType

from .loader import load_module_graph


class StageGraphResult(TypedDict, total=False):
    entry: str
    modules: int
    _warnings: list[str]
    _metrics: dict[str, int]


def stage_graph(ctx: BuildContext) -> StageGraphResult:
    layout = ctx.layout

    if not layout.entry.is_file():
        if layout.legacy_script.is_file():
            ctx.legacy_script = layout.legacy_script
            return {
                "entry": str(layout.legacy_script),
                "modules": 0,
                "_warnings": [
                    f"Entry module {layout.entry} not found; "
                    f"using legacy script {layout.legacy_script} verbatim"
                ],
            }
        raise EntryModuleError(
            f"Entry module not found: {layout.entry} "
            f"(no legacy script at {layout.legacy_script} either)"
        )

    res = load_module_graph(layout.entry)
    ctx.graph = res.graph

    ctx.emit(
        EventType.GRAPH_LOADED,
        stage="graph",
        entry=str(layout.entry),
        modules=len(res.graph),
        externals=sorted(set(res.externals)),
    )

    return {
        "entry": str(res.graph.entry),
        "modules": len(res.graph),
        "_warnings": res.warnings,
        "_metrics": {
            "modules": len(res.graph),
            "externals": len(res.externals),
            "unsupported": res.unsupported,
        },
    }
