from .aggregator import (
    StyleResult,
    StyleSourceKind,
    aggregate_styles,
    resolve_style_source,
)
from .stage import stage_styles

__all__ = [
    "aggregate_styles",
    "resolve_style_source",
    "stage_styles",
    "StyleResult",
    "StyleSourceKind",
]
