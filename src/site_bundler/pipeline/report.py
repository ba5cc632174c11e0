from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Optional

from site_bundler.core import atomic_write_json

from .stage import StageResult


@dataclass(slots=True)
class RunReport:
    build_id: str
    command: str
    environment: str
    started_at_utc: str
    finished_at_utc: str
    status: str  # "success" | "failed"
    duration_ms: int

    stages: list[StageResult] = field(default_factory=list)
    events_jsonl: Optional[str] = None
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def fatal_failure(self) -> Optional[StageResult]:
        for s in self.stages:
            if s.status == "failed" and s.fatal:
                return s
        return None

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    def write_json(self, path: Path) -> None:
        atomic_write_json(Path(path), self.to_dict(), default=str)


def build_run_report(
    *,
    build_id: str,
    command: str,
    environment: str,
    started_at_utc: str,
    finished_at_utc: str,
    duration_ms: int,
    stage_results: list[StageResult],
    events_jsonl: str | None,
    meta: dict[str, Any] | None = None,
) -> RunReport:
    # Only fatal stages decide the outcome; sync/prune failures are recorded
    # but leave the build successful.
    failed = any(s.status == "failed" and s.fatal for s in stage_results)
    return RunReport(
        build_id=build_id,
        command=command,
        environment=environment,
        started_at_utc=started_at_utc,
        finished_at_utc=finished_at_utc,
        status="failed" if failed else "success",
        duration_ms=duration_ms,
        stages=stage_results,
        events_jsonl=events_jsonl,
        meta=meta or {},
    )
