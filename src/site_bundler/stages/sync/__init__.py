from .html import (
    VERSION_META_NAME,
    SyncResult,
    rewrite_references,
    sync_document,
    upsert_version_meta,
)
from .stage import stage_sync

__all__ = [
    "rewrite_references",
    "stage_sync",
    "sync_document",
    "SyncResult",
    "upsert_version_meta",
    "VERSION_META_NAME",
]
