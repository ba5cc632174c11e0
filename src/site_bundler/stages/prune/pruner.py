from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from site_bundler.artifacts import NAMING, ArtifactKind

log = structlog.get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RetainedFile:
    path: Path
    mtime_ns: int


@dataclass(slots=True)
class PruneResult:
    kept: dict[str, list[str]] = field(default_factory=dict)
    removed: dict[str, list[str]] = field(default_factory=dict)
    warnings: list[str] = field(default_factory=list)

    @property
    def removed_count(self) -> int:
        return sum(len(v) for v in self.removed.values())


def retention_set(
    out_dir: Path, pattern: re.Pattern[str], warnings: list[str]
) -> list[RetainedFile]:
    """
    Files in `out_dir` matching `pattern`, newest first (name breaks ties).
    Files that cannot be stat'ed are reported and left out.
    """
    try:
        entries = sorted(out_dir.iterdir())
    except OSError as e:
        warnings.append(f"Could not list {out_dir}: {e}")
        return []

    out: list[RetainedFile] = []
    for p in entries:
        if not pattern.match(p.name):
            continue
        try:
            st = p.stat()
        except OSError as e:
            warnings.append(f"Could not stat {p.name}: {e}")
            continue
        out.append(RetainedFile(path=p, mtime_ns=st.st_mtime_ns))

    out.sort(key=lambda f: (f.mtime_ns, f.path.name), reverse=True)
    return out


def prune_artifacts(out_dir: Path, *, keep: int) -> PruneResult:
    """
    Keep the `keep` most recently modified hashed artifacts of each kind and
    delete the rest. Best-effort: per-file failures become warnings.
    """
    if keep < 0:
        raise ValueError(f"keep must be >= 0, got {keep}")

    out_dir = Path(out_dir)
    result = PruneResult()
    if not out_dir.is_dir():
        result.warnings.append(f"Output directory does not exist: {out_dir}")
        return result

    for kind in ArtifactKind:
        files = retention_set(out_dir, NAMING[kind].pattern(), result.warnings)
        kept = files[:keep]
        result.kept[kind.value] = [f.path.name for f in kept]
        result.removed[kind.value] = []

        for f in files[keep:]:
            try:
                f.path.unlink()
            except FileNotFoundError:
                continue
            except OSError as e:
                result.warnings.append(f"Could not remove {f.path.name}: {e}")
                continue
            result.removed[kind.value].append(f.path.name)
            log.info("prune.removed", kind=kind.value, filename=f.path.name)

    return result
