from .bundle import stage_bundle
from .graph import stage_graph
from .manifest import stage_manifest
from .prepare import stage_prepare
from .prune import stage_prune
from .styles import stage_styles
from .sync import stage_sync
from .verify import stage_verify

__all__ = [
    "stage_prepare",
    "stage_graph",
    "stage_bundle",
    "stage_styles",
    "stage_manifest",
    "stage_sync",
    "stage_prune",
    "stage_verify",
]
