from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from site_bundler.artifacts import NAMING, Artifact, ArtifactKind
from site_bundler.core import ILogger, ProjectLayout, Settings, relpath_posix, sha256_file

from .events import EventSink, EventType, make_event
from .types import ArtifactRef

if TYPE_CHECKING:
    from site_bundler.stages.graph.models import ModuleGraph
    from site_bundler.stages.manifest.models import BuildManifest


@dataclass(slots=True)
class BuildContext:
    """
    Single owner of all state for one build invocation. Stages read their
    inputs from it and store their outputs on it; nothing is kept at module
    level, so repeated builds in one process cannot see each other's state.
    """

    build_id: str
    settings: Settings
    layout: ProjectLayout
    production: bool
    logger: ILogger
    events: EventSink
    run_dir: Path

    graph: ModuleGraph | None = None
    # set instead of `graph` when the build falls back to the legacy script
    legacy_script: Path | None = None
    artifacts: dict[ArtifactKind, Artifact] = field(default_factory=dict)
    manifest: BuildManifest | None = None

    # optional free-form metadata
    meta: dict[str, Any] = field(default_factory=dict)

    @property
    def environment(self) -> str:
        return "production" if self.production else "development"

    def stage_logger(self, stage: str) -> ILogger:
        return self.logger.bind(stage=stage)

    def emit(self, event: EventType | str, *, stage: str | None = None, **kw: Any) -> None:
        event_value = event.value if isinstance(event, EventType) else str(event)
        # Keep event chatter at debug level to leave console logs readable.
        self.logger.debug(event_value, event_type=event_value, stage=stage, **kw)
        self.events.emit(
            make_event(event_type=event_value, build_id=self.build_id, stage=stage, **kw)
        )

    def record_artifact(self, *, stage: str, artifact: Artifact) -> ArtifactRef:
        self.artifacts[artifact.kind] = artifact
        digest = sha256_file(artifact.path)
        rel = relpath_posix(artifact.path, self.layout.root)
        ref = ArtifactRef(
            kind=artifact.kind.value,
            path=rel,
            bytes=digest.bytes,
            sha256=digest.sha256,
            content_type=NAMING[artifact.kind].content_type,
        )
        self.emit(
            EventType.ARTIFACT_WRITTEN,
            stage=stage,
            kind=ref.kind,
            path=ref.path,
            bytes=ref.bytes,
            sha256=ref.sha256,
            content_type=ref.content_type,
        )
        return ref
