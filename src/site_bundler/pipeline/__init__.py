from .context import BuildContext
from .events import EventSink, EventType
from .report import RunReport
from .runner import PipelineRunner, RunOutcome
from .stage import FunctionStage, Stage, StageFn, StageResult
from .types import ArtifactRef, Event

__all__ = [
    "ArtifactRef",
    "BuildContext",
    "Event",
    "EventSink",
    "EventType",
    "FunctionStage",
    "PipelineRunner",
    "RunOutcome",
    "RunReport",
    "Stage",
    "StageFn",
    "StageResult",
]
