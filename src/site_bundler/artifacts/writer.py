from __future__ import annotations

from pathlib import Path

import structlog
from site_bundler.core import atomic_write_bytes, content_hash

from .models import NAMING, Artifact, ArtifactKind

log = structlog.get_logger(__name__)


class ArtifactWriter:
    """
    Writes build outputs under content-derived filenames.

    Writing identical content twice lands on the same filename with the same
    bytes.
    """

    def __init__(self, out_dir: Path) -> None:
        self.out_dir = Path(out_dir)

    def write(self, kind: ArtifactKind, content: str) -> Artifact:
        data = content.encode("utf-8")
        digest = content_hash(data)
        filename = NAMING[kind].filename(digest)
        path = self.out_dir / filename

        atomic_write_bytes(path, data)
        log.debug("artifact.write", kind=kind.value, filename=filename, bytes=len(data))

        return Artifact(
            kind=kind, content=content, hash=digest, filename=filename, path=path
        )
