"""
Rewrites asset references inside consumer HTML documents.

Only these tag/attribute pairs are touched:

    <script src="...">   script artifact
    <link href="...">    style artifact

and only when the attribute value names a file of the artifact's stem inside
the output directory, e.g. `dist/main.js`, `../dist/main.0123456789.js?v=2`.
The whole value is replaced with `<prefix><current filename>`.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from site_bundler.artifacts import NAMING, ArtifactKind
from site_bundler.core import atomic_write_text
from site_bundler.stages.manifest import BuildManifest

log = structlog.get_logger(__name__)

VERSION_META_NAME = "asset-version"

_TAG_ATTRIBUTE: dict[ArtifactKind, tuple[str, str]] = {
    ArtifactKind.SCRIPT: ("script", "src"),
    ArtifactKind.STYLE: ("link", "href"),
}


@dataclass(slots=True)
class SyncResult:
    path: Path
    changed: bool = False
    replacements: dict[str, int] = field(default_factory=dict)
    version_meta: str = "unchanged"  # "inserted" | "replaced" | "unchanged" | "missing-anchor"
    warnings: list[str] = field(default_factory=list)


def _reference_value(out_dir_name: str, stem: str, ext: str) -> re.Pattern[str]:
    return re.compile(
        rf"^[^\"'<>]*?(?<![^/]){re.escape(out_dir_name)}/"
        rf"{re.escape(stem)}(?:\.[a-f0-9]+)?\.{re.escape(ext)}(?:[?#][^\"'<>]*)?$"
    )


def _tag_pattern(tag: str) -> re.Pattern[str]:
    return re.compile(rf"<{tag}\b[^>]*>", re.IGNORECASE)


def _attr_pattern(attr: str) -> re.Pattern[str]:
    return re.compile(
        rf"(?P<lead>\s{attr}\s*=\s*)(?P<q>[\"'])(?P<value>[^\"']*)(?P=q)",
        re.IGNORECASE,
    )


def rewrite_references(
    html: str,
    *,
    kind: ArtifactKind,
    filename: str,
    prefix: str,
    out_dir_name: str = "dist",
) -> tuple[str, int]:
    """
    Point every allow-listed reference of `kind` at `prefix + filename`.
    Returns (new_html, number_of_matching_references).
    """
    naming = NAMING[kind]
    tag, attr = _TAG_ATTRIBUTE[kind]
    value_re = _reference_value(out_dir_name, naming.stem, naming.ext)
    attr_re = _attr_pattern(attr)
    new_value = f"{prefix}{filename}"
    count = 0

    def _attr(m: re.Match[str]) -> str:
        nonlocal count
        if not value_re.match(m.group("value")):
            return m.group(0)
        count += 1
        return f"{m.group('lead')}{m.group('q')}{new_value}{m.group('q')}"

    def _tag(m: re.Match[str]) -> str:
        return attr_re.sub(_attr, m.group(0))

    return _tag_pattern(tag).sub(_tag, html), count


_VERSION_META = re.compile(
    rf"<meta\s+name=[\"']{VERSION_META_NAME}[\"'][^>]*>", re.IGNORECASE
)


def _anchor_patterns(anchor: str) -> list[re.Pattern[str]]:
    return [
        re.compile(rf"<meta\s+name=[\"']{re.escape(anchor)}[\"'][^>]*>", re.IGNORECASE),
        re.compile(r"<head\b[^>]*>", re.IGNORECASE),
    ]


def _line_indent(html: str, pos: int) -> str:
    line_start = html.rfind("\n", 0, pos) + 1
    m = re.match(r"[ \t]*", html[line_start:pos])
    return m.group(0) if m else ""


def upsert_version_meta(html: str, version: str, *, anchor: str) -> tuple[str, str]:
    """
    Replace the asset-version meta tag in place, or insert it on the line
    after the anchor meta tag (falling back to <head>).
    Returns (new_html, action).
    """
    tag = f'<meta name="{VERSION_META_NAME}" content="{version}">'

    if _VERSION_META.search(html):
        new_html = _VERSION_META.sub(tag, html, count=1)
        return new_html, ("unchanged" if new_html == html else "replaced")

    for i, pat in enumerate(_anchor_patterns(anchor)):
        m = pat.search(html)
        if m is None:
            continue
        indent = _line_indent(html, m.start())
        if i > 0:
            indent += "    "
        insert = f"\n{indent}{tag}"
        return html[: m.end()] + insert + html[m.end() :], "inserted"

    return html, "missing-anchor"


def sync_document(
    path: Path,
    *,
    prefix: str,
    manifest: BuildManifest,
    out_dir_name: str = "dist",
    anchor: str = "apple-mobile-web-app-status-bar-style",
) -> SyncResult:
    """
    Bring one consumer document in line with `manifest`. The file is only
    rewritten when its content changes, so a second pass is a no-op.
    """
    path = Path(path)
    result = SyncResult(path=path)
    original = path.read_text(encoding="utf-8")
    html = original

    for kind in ArtifactKind:
        entry = manifest.assets.get(kind.value)
        if entry is None:
            continue
        html, n = rewrite_references(
            html,
            kind=kind,
            filename=entry.filename,
            prefix=prefix,
            out_dir_name=out_dir_name,
        )
        result.replacements[kind.value] = n
        if n == 0:
            result.warnings.append(
                f"{path.name}: no {kind.value} reference to {out_dir_name}/"
                f"{NAMING[kind].stem}.*.{NAMING[kind].ext} found"
            )

    html, result.version_meta = upsert_version_meta(
        html, manifest.version, anchor=anchor
    )
    if result.version_meta == "missing-anchor":
        result.warnings.append(
            f"{path.name}: no anchor tag for the {VERSION_META_NAME} meta tag"
        )

    if html != original:
        atomic_write_text(path, html)
        result.changed = True

    log.debug(
        "sync.document",
        path=str(path),
        changed=result.changed,
        replacements=result.replacements,
        version_meta=result.version_meta,
    )
    return result
