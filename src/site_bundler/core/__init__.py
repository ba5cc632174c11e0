from .config import ConsumerDocument, Settings, load_settings
from .errors import (
    BundleError,
    BundlerError,
    EntryModuleError,
    ManifestError,
    OutputDirError,
    StageError,
    StyleError,
    SyncError,
    VerifyError,
    stage_error_from_exc,
)
from .fs import atomic_write_bytes, atomic_write_text, probe_writable_dir, relpath_posix
from .hashing import CONTENT_HASH_LENGTH, content_hash, sha256_bytes, sha256_file
from .json import atomic_write_json, pretty_json
from .logging import ILogger, bind, clear_bindings, configure_logging, get_logger
from .paths import ProjectLayout
from .provenance import Timer, new_build_id
from .time import monotonic_ms, utc_now_iso

__all__ = [
    "atomic_write_bytes",
    "atomic_write_json",
    "atomic_write_text",
    "bind",
    "BundleError",
    "BundlerError",
    "clear_bindings",
    "configure_logging",
    "ConsumerDocument",
    "CONTENT_HASH_LENGTH",
    "content_hash",
    "EntryModuleError",
    "get_logger",
    "ILogger",
    "load_settings",
    "ManifestError",
    "monotonic_ms",
    "new_build_id",
    "OutputDirError",
    "pretty_json",
    "probe_writable_dir",
    "ProjectLayout",
    "relpath_posix",
    "Settings",
    "sha256_bytes",
    "sha256_file",
    "stage_error_from_exc",
    "StageError",
    "StyleError",
    "SyncError",
    "Timer",
    "utc_now_iso",
    "VerifyError",
]
