from __future__ import annotations

from typing import Any

from site_bundler.core import VerifyError
from site_bundler.pipeline import BuildContext
from site_bundler.pipeline.events import EventType

from .runner import verify_build


def stage_verify(ctx: BuildContext) -> dict[str, Any]:
    log = ctx.stage_logger("verify")
    report = verify_build(ctx.layout, ctx.settings.documents)

    ctx.emit(
        EventType.VERIFY_FINISH,
        stage="verify",
        ok=report.ok,
        assets=report.checked_assets,
        documents=report.checked_documents,
        issues=report.issues,
    )

    if not report.ok:
        for issue in report.issues:
            log.error("Verification issue", issue=issue)
        raise VerifyError(f"Build verification found {len(report.issues)} issue(s)")

    return {
        "version": report.manifest.version,
        "assets": report.checked_assets,
        "documents": report.checked_documents,
        "_warnings": report.warnings,
        "_metrics": {
            "assets": len(report.checked_assets),
            "documents": len(report.checked_documents),
        },
    }
