from __future__ import annotations

import argparse
from typing import Any, Callable, cast

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from site_bundler.core import (
    ILogger,
    Settings,
    bind,
    clear_bindings,
    configure_logging,
    get_logger,
    load_settings,
    new_build_id,
)
from site_bundler.pipeline.runner import PipelineRunner, RunOutcome
from site_bundler.pipeline.stage import Stage, StageFn, format_duration_ms
from site_bundler.stages import (
    stage_bundle,
    stage_graph,
    stage_manifest,
    stage_prepare,
    stage_prune,
    stage_styles,
    stage_sync,
    stage_verify,
)

console = Console()

_COMMANDS: dict[str, str] = {
    "dev": "Development build: bundle, styles, manifest, sync documents",
    "prod": "Production build: minified bundle, manifest, sync, prune old assets",
    "sync": "Re-synchronise consumer documents from the existing manifest",
    "prune": "Remove all but the newest hashed assets of each kind",
    "verify": "Check manifest assets exist and documents reference them",
}

_STAGE_FNS: dict[str, Callable[[Any], object]] = {
    "prepare": stage_prepare,
    "graph": stage_graph,
    "bundle": stage_bundle,
    "styles": stage_styles,
    "manifest": stage_manifest,
    "sync": stage_sync,
    "prune": stage_prune,
    "verify": stage_verify,
}

_BUILD = ("prepare", "graph", "bundle", "styles", "manifest", "sync")

_PIPELINES: dict[str, tuple[str, ...]] = {
    "dev": _BUILD,
    "prod": (*_BUILD, "prune"),
    "sync": ("sync",),
    "prune": ("prune",),
    "verify": ("verify",),
}

# Inside a full build these only touch files outside the artifact set, so a
# failure there leaves a usable build behind.
_NON_FATAL_IN_BUILD = frozenset({"sync", "prune"})


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(prog="site-bundler")
    sub = p.add_subparsers(dest="cmd", required=True)
    for cmd, help_text in _COMMANDS.items():
        sub.add_parser(cmd, help=help_text)
    return p


def _normalize_stage_fn(fn: Callable[[Any], object]) -> StageFn:
    def _wrapped(ctx):
        return cast(dict[str, Any] | None, fn(ctx))

    return _wrapped


def _with_status(stage_id: str, fn: StageFn) -> StageFn:
    def _run_with_status(ctx):
        with console.status(f"[bold]{stage_id}[/]", spinner="dots"):
            return fn(ctx)

    return _run_with_status


def _is_fatal(cmd: str, stage_id: str) -> bool:
    return not (cmd in ("dev", "prod") and stage_id in _NON_FATAL_IN_BUILD)


def build_stages(cmd: str, *, status: bool = False) -> list[Stage]:
    stages: list[Stage] = []
    for sid in _PIPELINES[cmd]:
        fn = _normalize_stage_fn(_STAGE_FNS[sid])
        if status:
            fn = _with_status(sid, fn)
        stages.append(PipelineRunner.fn(sid, fn, fatal=_is_fatal(cmd, sid)))
    return stages


def run_command(
    cmd: str,
    settings: Settings,
    *,
    logger: ILogger | None = None,
    build_id: str | None = None,
    status: bool = False,
) -> RunOutcome:
    if cmd not in _PIPELINES:
        raise ValueError(f"Unknown command: {cmd}")
    runner = PipelineRunner(stages=build_stages(cmd, status=status), logger=logger)
    return runner.run(
        settings=settings,
        command=cmd,
        production=(cmd == "prod"),
        build_id=build_id,
    )


def _result_table(cmd: str, outcome: RunOutcome) -> Table:
    by_id = {r.stage: r for r in outcome.report.stages}

    tbl = Table(title="Result", show_header=True, box=None)
    tbl.add_column("stage")
    tbl.add_column("status")
    tbl.add_column("duration", justify="right")
    tbl.add_column("warnings", justify="right")
    for sid in _PIPELINES[cmd]:
        r = by_id.get(sid)
        if r is None:
            tbl.add_row(sid, "[dim]skipped[/dim]", "-", "-")
            continue
        if r.status == "success":
            mark = "[green]ok[/green]"
        elif r.fatal:
            mark = "[red]failed[/red]"
        else:
            mark = "[yellow]failed (non-fatal)[/yellow]"
        tbl.add_row(
            sid, mark, format_duration_ms(r.duration_ms), str(len(r.warnings))
        )
    return tbl


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    cmd = str(args.cmd)

    s = load_settings()
    configure_logging(level=s.log_level, fmt=s.log_format)
    log = get_logger("site_bundler")

    build_id = new_build_id()
    clear_bindings()
    bind(build_id=build_id, command=cmd)

    console.print(
        Panel.fit(
            Text(
                f"site-bundler - {cmd}\nbuild_id={build_id}\nproject_root={s.project_root}",
                style="bold",
            ),
            title="Build",
        )
    )

    outcome = run_command(cmd, s, logger=log, build_id=build_id, status=True)

    tbl = _result_table(cmd, outcome)
    console.print(tbl)
    console.print(
        "status",
        "[green]ok[/green]" if outcome.exit_code == 0 else "[red]failed[/red]",
        f"report={outcome.report_path}",
    )
    manifest = outcome.context.manifest
    if manifest is not None:
        console.print(f"version={manifest.version}")

    return int(outcome.exit_code)


if __name__ == "__main__":
    raise SystemExit(main())
