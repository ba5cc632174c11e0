from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .config import Settings


@dataclass(frozen=True, slots=True)
class ProjectLayout:
    """
    Canonical path layout for a site project:

      {root}/src/main.js               entry module
      {root}/src/styles/main.css       modular stylesheet root
      {root}/js/main.js                legacy single-file script
      {root}/css/style.css             legacy single-file stylesheet
      {root}/dist/                     hashed artifacts + build-manifest.json
      {root}/.bundler/runs/{build_id}/ events.jsonl + run_report.json
    """

    root: Path
    src_dir: Path
    entry: Path
    styles_root: Path
    legacy_script: Path
    legacy_style: Path
    out_dir: Path
    manifest_json: Path
    run_root: Path

    @classmethod
    def from_settings(cls, s: Settings) -> "ProjectLayout":
        root = Path(s.project_root).expanduser().resolve()
        src_dir = root / s.src_dir
        out_dir = root / s.out_dir
        return cls(
            root=root,
            src_dir=src_dir,
            entry=src_dir / s.entry,
            styles_root=src_dir / s.styles_root,
            legacy_script=root / s.legacy_script,
            legacy_style=root / s.legacy_style,
            out_dir=out_dir,
            manifest_json=out_dir / s.manifest_name,
            run_root=root / s.run_root,
        )

    def existing_style_output(self) -> Path:
        """Unhashed aggregate left in the output dir by older builds."""
        return self.out_dir / "style.css"

    def document(self, rel: Path) -> Path:
        return self.root / rel

    def run_dir(self, build_id: str) -> Path:
        return self.run_root / build_id
