from .emitter import emit_bundle, transform_module
from .minify import minify_js, strip_comments, strip_dev_overlay
from .stage import stage_bundle

__all__ = [
    "emit_bundle",
    "minify_js",
    "stage_bundle",
    "strip_comments",
    "strip_dev_overlay",
    "transform_module",
]
