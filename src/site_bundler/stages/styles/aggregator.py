from __future__ import annotations

import re
from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path

import structlog
from site_bundler.core import ProjectLayout

log = structlog.get_logger(__name__)

_IMPORT = re.compile(
    r"""@import\s+(?:url\(\s*)?(['"]?)([^'")\s;]+)\1(?:\s*\))?([^;\n]*);?"""
)
_REMOTE = ("http:", "https:", "//", "data:")
# Import conditions that cannot be expressed by wrapping the sheet in @media.
_UNWRAPPABLE = ("layer", "supports(")


class StyleSourceKind(StrEnum):
    MODULAR = "modular"
    LEGACY = "legacy"
    EXISTING = "existing"


@dataclass(slots=True)
class StyleResult:
    content: str
    kind: StyleSourceKind
    source: Path
    included: list[Path] = field(default_factory=list)
    warnings: list[str] = field(default_factory=list)


def _inline(
    path: Path, text: str, *, stack: tuple[Path, ...], result: StyleResult
) -> str:
    def _sub(m: re.Match[str]) -> str:
        spec = m.group(2)
        media = m.group(3).strip()
        if spec.startswith(_REMOTE):
            return m.group(0)
        if media.startswith(_UNWRAPPABLE):
            result.warnings.append(
                f"CSS import {spec!r} in {path.name} has condition {media!r}; "
                "left untouched"
            )
            return m.group(0)

        target = (path.parent / spec).resolve()
        if target in stack:
            result.warnings.append(
                f"Circular CSS import {spec!r} in {path.name}; left untouched"
            )
            return m.group(0)
        try:
            imported = target.read_text(encoding="utf-8")
        except FileNotFoundError:
            result.warnings.append(f"CSS import file not found: {target}")
            return m.group(0)
        except (OSError, UnicodeDecodeError) as e:
            result.warnings.append(f"Could not read CSS import {spec!r}: {e}")
            return m.group(0)

        result.included.append(target)
        log.debug("styles.import", specifier=spec, path=str(target))
        body = _inline(target, imported, stack=(*stack, target), result=result)
        if media:
            return (
                f"/* Imported from {spec} ({media}) */\n"
                f"@media {media} {{\n{body}\n}}"
            )
        return f"/* Imported from {spec} */\n{body}"

    return _IMPORT.sub(_sub, text)


def aggregate_styles(root: Path) -> StyleResult:
    """
    Inline every local `@import` of `root`, recursively, relative to the
    including file. Each inlined block is preceded by a provenance comment.
    """
    root = Path(root).resolve()
    text = root.read_text(encoding="utf-8")
    result = StyleResult(content="", kind=StyleSourceKind.MODULAR, source=root)
    result.content = _inline(root, text, stack=(root,), result=result)
    return result


def resolve_style_source(layout: ProjectLayout) -> StyleResult | None:
    """
    Pick the stylesheet for this build:
      1) modular root (aggregated)
      2) legacy single file (verbatim)
      3) unhashed aggregate already in the output dir (verbatim)

    Returns None when none exists; styles are optional.
    """
    if layout.styles_root.is_file():
        return aggregate_styles(layout.styles_root)

    for kind, path in (
        (StyleSourceKind.LEGACY, layout.legacy_style),
        (StyleSourceKind.EXISTING, layout.existing_style_output()),
    ):
        if path.is_file():
            return StyleResult(
                content=path.read_text(encoding="utf-8"), kind=kind, source=path
            )

    return None
