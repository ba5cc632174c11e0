from __future__ import annotations

from site_bundler.core import OutputDirError, probe_writable_dir
from site_bundler.pipeline import BuildContext


def stage_prepare(ctx: BuildContext) -> dict[str, object]:
    out_dir = ctx.layout.out_dir
    try:
        probe_writable_dir(out_dir)
    except OSError as e:
        raise OutputDirError(f"Output directory is not writable: {out_dir}: {e}") from e

    return {"out_dir": str(out_dir)}
