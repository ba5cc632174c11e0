from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Optional


@dataclass(frozen=True, slots=True)
class ArtifactRef:
    """
    Run-report view of a written artifact: project-relative path plus the
    full sha256 of the bytes on disk (the filename carries only a prefix).
    """

    kind: str
    path: str
    bytes: int
    sha256: str
    content_type: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Event:
    """One line of events.jsonl."""

    type: str
    ts_utc: str
    build_id: str
    stage: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
