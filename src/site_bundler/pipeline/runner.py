from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from site_bundler.core import (
    ILogger,
    ProjectLayout,
    Settings,
    configure_logging,
    get_logger,
    monotonic_ms,
    new_build_id,
    utc_now_iso,
)

from .context import BuildContext
from .events import EventSink, EventType
from .report import RunReport, build_run_report
from .stage import (
    FunctionStage,
    Stage,
    StageFn,
    StageResult,
    format_duration_ms,
    run_stage,
)


@dataclass(frozen=True, slots=True)
class RunOutcome:
    exit_code: int
    report_path: Path
    report: RunReport
    context: BuildContext


def default_logger() -> ILogger:
    configure_logging()
    return get_logger("site_bundler.pipeline")


class PipelineRunner:
    """
    Runs stages in order against one BuildContext.

    A failed fatal stage ends the run; a failed non-fatal stage is recorded
    and the next stage runs.
    """

    def __init__(
        self,
        *,
        stages: Sequence[Stage],
        logger: ILogger | None = None,
    ) -> None:
        self.stages = list(stages)
        self.logger: ILogger = logger or default_logger()

        ids = [s.stage_id for s in self.stages]
        if len(ids) != len(set(ids)):
            dupes = sorted({x for x in ids if ids.count(x) > 1})
            raise ValueError(f"Duplicate stage_id(s): {dupes}")

    @staticmethod
    def fn(stage_id: str, fn: StageFn, *, fatal: bool = True) -> Stage:
        return FunctionStage(stage_id=stage_id, fn=fn, fatal=fatal)

    def _execute(self, ctx: BuildContext) -> list[StageResult]:
        results: list[StageResult] = []
        total = len(self.stages)
        for idx, st in enumerate(self.stages, start=1):
            res = run_stage(ctx=ctx, stage=st, index=idx, total=total)
            results.append(res)
            if res.status == "failed" and res.fatal:
                skipped = [s.stage_id for s in self.stages[idx:]]
                self.logger.error(
                    "Stopping on fatal failure", stage=st.stage_id, skipped=skipped
                )
                break
        return results

    def run(
        self,
        *,
        settings: Settings,
        command: str,
        production: bool,
        build_id: str | None = None,
        meta: dict[str, Any] | None = None,
    ) -> RunOutcome:
        """
        Execute one command and leave behind, under run_root/<build_id>/:
          - events.jsonl
          - run_report.json
        """
        meta = meta or {}
        bid = build_id or new_build_id()
        layout = ProjectLayout.from_settings(settings)
        run_dir = layout.run_dir(bid)
        events_path = run_dir / "events.jsonl"
        report_json = run_dir / "run_report.json"

        with EventSink(events_path, build_id=bid) as sink:
            ctx = BuildContext(
                build_id=bid,
                settings=settings,
                layout=layout,
                production=production,
                logger=self.logger,
                events=sink,
                run_dir=run_dir,
                meta=meta,
            )

            started_at = utc_now_iso()
            t0 = monotonic_ms()
            self.logger.info(
                "Build starting",
                build_id=bid,
                command=command,
                environment=ctx.environment,
                stages=[s.stage_id for s in self.stages],
                project_root=str(layout.root),
            )
            ctx.emit(EventType.RUN_START, command=command, environment=ctx.environment)

            results = self._execute(ctx)

            duration = monotonic_ms() - t0
            report = build_run_report(
                build_id=bid,
                command=command,
                environment=ctx.environment,
                started_at_utc=started_at,
                finished_at_utc=utc_now_iso(),
                duration_ms=duration,
                stage_results=results,
                events_jsonl=str(events_path),
                meta=meta,
            )
            report.write_json(report_json)
            ctx.emit(
                EventType.RUN_FINISH,
                status=report.status,
                duration_ms=duration,
                report_json=str(report_json),
            )

        ok = report.status == "success"
        (self.logger.info if ok else self.logger.error)(
            "Build complete" if ok else "Build failed",
            build_id=bid,
            duration=format_duration_ms(duration),
            report=str(report_json),
            status=report.status,
        )

        return RunOutcome(
            exit_code=0 if ok else 1,
            report_path=report_json,
            report=report,
            context=ctx,
        )
