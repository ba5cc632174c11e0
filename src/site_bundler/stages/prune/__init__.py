from .pruner import PruneResult, RetainedFile, prune_artifacts, retention_set
from .stage import stage_prune

__all__ = [
    "prune_artifacts",
    "PruneResult",
    "RetainedFile",
    "retention_set",
    "stage_prune",
]
