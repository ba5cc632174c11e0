from __future__ import annotations

import json
import os
import platform
from dataclasses import asdict
from enum import Enum
from pathlib import Path
from typing import IO, Any, Optional

from site_bundler.core import utc_now_iso

from .types import Event


class EventType(str, Enum):
    RUN_ENV = "run.env"
    RUN_START = "run.start"
    RUN_FINISH = "run.finish"

    STAGE_START = "stage.start"
    STAGE_WARN = "stage.warn"
    STAGE_METRICS = "stage.metrics"
    STAGE_SUCCESS = "stage.success"
    STAGE_FAILED = "stage.failed"

    ARTIFACT_WRITTEN = "artifact.written"

    GRAPH_LOADED = "graph.loaded"
    BUNDLE_EMITTED = "bundle.emitted"
    STYLES_RESOLVED = "styles.resolved"
    STYLES_SKIPPED = "styles.skipped"
    MANIFEST_WRITTEN = "manifest.written"
    SYNC_DOCUMENT = "sync.document"
    SYNC_SKIP = "sync.skip"
    PRUNE_FINISH = "prune.finish"
    VERIFY_FINISH = "verify.finish"


class EventSink:
    """
    events.jsonl for one build: one JSON object per line, flushed per event
    so the file is readable while the build runs and after a crash.

    The first line describes the environment the build ran in.
    """

    def __init__(self, path: Path, *, build_id: str) -> None:
        self.path = Path(path)
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._fh: IO[str] | None = self.path.open("a", encoding="utf-8")

        self.emit(
            make_event(
                event_type=EventType.RUN_ENV,
                build_id=build_id,
                python=platform.python_version(),
                platform=platform.platform(),
                pid=os.getpid(),
                cwd=str(Path.cwd()),
            )
        )

    def emit(self, event: Event) -> None:
        if self._fh is None:
            raise ValueError(f"Event sink is closed: {self.path}")
        self._fh.write(json.dumps(asdict(event), ensure_ascii=False, default=str))
        self._fh.write("\n")
        self._fh.flush()

    def close(self) -> None:
        if self._fh is not None:
            self._fh.close()
            self._fh = None

    def __enter__(self) -> "EventSink":
        return self

    def __exit__(self, *exc: object) -> None:
        self.close()


def make_event(
    *,
    event_type: EventType | str,
    build_id: str,
    stage: Optional[str] = None,
    **data: Any,
) -> Event:
    return Event(
        type=event_type.value if isinstance(event_type, EventType) else str(event_type),
        ts_utc=utc_now_iso(),
        build_id=build_id,
        stage=stage,
        data=data,
    )
