from __future__ import annotations

import traceback
from dataclasses import dataclass


class BundlerError(RuntimeError):
    """Base error"""


@dataclass(frozen=True, slots=True)
class StageError:
    """
    A normalized error record for stage failures.
    """

    exc_type: str
    message: str
    traceback: str


def stage_error_from_exc(exc: BaseException) -> StageError:
    return StageError(
        exc_type=type(exc).__name__,
        message=str(exc),
        traceback="".join(
            traceback.format_exception(type(exc), exc, exc.__traceback__)
        ),
    )


class EntryModuleError(BundlerError):
    """
    Fatal: the entry module (or its legacy fallback) is missing or unreadable
    """


class OutputDirError(BundlerError):
    """Fatal: the output directory cannot be created or written"""


class BundleError(BundlerError):
    """Bundle emission or write failure"""


class StyleError(BundlerError):
    """Stylesheet aggregation or write failure"""


class ManifestError(BundlerError):
    """
    Manifest missing, unreadable, or not matching the manifest schema
    """


class SyncError(BundlerError):
    """Consumer document synchronization failure"""


class VerifyError(BundlerError):
    """Build integrity check failed"""
