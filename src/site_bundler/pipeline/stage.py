from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Optional, Protocol

from site_bundler.core import StageError, monotonic_ms, stage_error_from_exc, utc_now_iso

from .context import BuildContext
from .events import EventType
from .types import ArtifactRef


def format_duration_ms(ms: int) -> str:
    """Return a short human-readable duration string."""
    if ms < 1000:
        return f"{ms} ms"
    return f"{ms / 1000:.2f} s"


StageFn = Callable[[BuildContext], dict[str, Any] | None]


@dataclass(slots=True)
class FunctionStage:
    """
    Adapter that turns a plain function into a Stage.

    A failing fatal stage stops the run; a failing non-fatal stage is recorded
    and the run carries on.
    """

    stage_id: str
    fn: StageFn
    fatal: bool = True

    def run(self, ctx: BuildContext) -> dict[str, Any] | None:
        return self.fn(ctx)


@dataclass(slots=True)
class StageResult:
    stage: str
    status: str  # "success" | "failed"
    fatal: bool
    started_at_utc: str
    finished_at_utc: str
    duration_ms: int

    outputs: dict[str, Any] = field(default_factory=dict)
    metrics: dict[str, Any] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)
    artifacts: list[ArtifactRef] = field(default_factory=list)
    error: Optional[StageError] = None


class Stage(Protocol):
    stage_id: str
    fatal: bool

    def run(self, ctx: BuildContext) -> dict[str, Any] | None: ...


def _pop_list(out: dict[str, Any], key: str) -> list[Any]:
    v = out.pop(key, None)
    return list(v) if isinstance(v, list) else []


def run_stage(
    *,
    ctx: BuildContext,
    stage: Stage,
    index: int | None = None,
    total: int | None = None,
) -> StageResult:
    stage_id = stage.stage_id
    log = ctx.stage_logger(stage_id)

    t0 = monotonic_ms()
    started_at = utc_now_iso()
    position = f"{index}/{total}" if index is not None and total is not None else None

    ctx.emit(EventType.STAGE_START, stage=stage_id)
    log.debug("Stage starting", position=position, started_at=started_at)

    try:
        out = stage.run(ctx) or {}
        if not isinstance(out, dict):
            raise TypeError(
                f"Stage {stage_id} returned {type(out).__name__}, expected dict or None"
            )
    except Exception as e:
        error = stage_error_from_exc(e)
        duration = monotonic_ms() - t0

        ctx.emit(
            EventType.STAGE_FAILED,
            stage=stage_id,
            duration_ms=duration,
            exc_type=type(e).__name__,
            message=str(e),
            fatal=stage.fatal,
        )
        log_fields: dict[str, object] = {
            "status": "failed",
            "fatal": stage.fatal,
            "position": position,
            "duration": format_duration_ms(duration),
            "error": str(e),
        }
        if stage.fatal:
            log.error("Stage failed", **log_fields)
            log.debug("Stage exception", traceback=error.traceback)
        else:
            log.warning("Stage failed (non-fatal)", **log_fields)

        return StageResult(
            stage=stage_id,
            status="failed",
            fatal=stage.fatal,
            started_at_utc=started_at,
            finished_at_utc=utc_now_iso(),
            duration_ms=duration,
            error=error,
        )

    warnings = [str(x) for x in _pop_list(out, "_warnings")]
    artifacts = _pop_list(out, "_artifacts")
    metrics = out.pop("_metrics", None)
    metrics = dict(metrics) if isinstance(metrics, dict) else {}

    for w in warnings:
        ctx.emit(EventType.STAGE_WARN, stage=stage_id, message=w)
        log.warning(w)

    if metrics:
        ctx.emit(EventType.STAGE_METRICS, stage=stage_id, metrics=metrics)

    duration = monotonic_ms() - t0
    ctx.emit(EventType.STAGE_SUCCESS, stage=stage_id, duration_ms=duration)

    log_fields = {
        "status": "success",
        "position": position,
        "duration": format_duration_ms(duration),
        "warnings": len(warnings),
        "metrics": metrics,
    }
    if artifacts:
        log_fields["artifacts"] = len(artifacts)
    log.info("Stage succeeded", **log_fields)

    return StageResult(
        stage=stage_id,
        status="success",
        fatal=stage.fatal,
        started_at_utc=started_at,
        finished_at_utc=utc_now_iso(),
        duration_ms=duration,
        outputs=out,
        metrics=metrics,
        warnings=warnings,
        artifacts=artifacts,
    )
