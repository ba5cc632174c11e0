from __future__ import annotations

import re
from dataclasses import dataclass
from enum import StrEnum
from pathlib import Path

from site_bundler.core import CONTENT_HASH_LENGTH


class ArtifactKind(StrEnum):
    SCRIPT = "script"
    STYLE = "style"


@dataclass(frozen=True, slots=True)
class ArtifactNaming:
    stem: str
    ext: str
    content_type: str

    def filename(self, content_hash: str) -> str:
        return f"{self.stem}.{content_hash}.{self.ext}"

    def pattern(self) -> re.Pattern[str]:
        """Matches hashed filenames of this kind in the output directory."""
        return re.compile(
            rf"^{re.escape(self.stem)}\.[a-f0-9]{{{CONTENT_HASH_LENGTH}}}\.{re.escape(self.ext)}$"
        )


NAMING: dict[ArtifactKind, ArtifactNaming] = {
    ArtifactKind.SCRIPT: ArtifactNaming(
        stem="main", ext="js", content_type="text/javascript"
    ),
    ArtifactKind.STYLE: ArtifactNaming(stem="style", ext="css", content_type="text/css"),
}


@dataclass(frozen=True, slots=True)
class Artifact:
    kind: ArtifactKind
    content: str
    hash: str
    filename: str
    path: Path

    @property
    def bytes(self) -> int:
        return len(self.content.encode("utf-8"))
