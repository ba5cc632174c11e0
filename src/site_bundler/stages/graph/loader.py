from __future__ import annotations

import dataclasses
import os
from dataclasses import dataclass, field
from pathlib import Path

import structlog
from site_bundler.core import EntryModuleError

from .directives import scan_directives
from .models import Directive, DirectiveKind, ModuleGraph, SourceModule

log = structlog.get_logger(__name__)

MODULE_EXTENSION = ".js"


@dataclass(slots=True)
class GraphLoadResult:
    graph: ModuleGraph
    warnings: list[str] = field(default_factory=list)
    externals: list[str] = field(default_factory=list)
    unsupported: int = 0


def canonical(path: Path) -> Path:
    return Path(os.path.realpath(path))


def resolve_specifier(specifier: str, importer: Path) -> Path | None:
    """
    Resolve a relative specifier against the importing file.

    Returns None for bare specifiers and for relative ones that do not point
    at an existing file.
    """
    if not specifier.startswith(("./", "../")):
        return None
    candidate = importer.parent / specifier
    if candidate.suffix != MODULE_EXTENSION:
        candidate = candidate.with_name(candidate.name + MODULE_EXTENSION)
    if not candidate.is_file():
        return None
    return canonical(candidate)


def _read_source(path: Path) -> str:
    return path.read_text(encoding="utf-8")


class _GraphBuilder:
    def __init__(self, entry: Path) -> None:
        self.entry = canonical(entry)
        self.graph = ModuleGraph(entry=self.entry)
        self.result = GraphLoadResult(graph=self.graph)
        self._visited: set[Path] = set()

    def _warn(self, message: str, **kw: object) -> None:
        self.result.warnings.append(message)
        log.debug("graph.warning", message=message, **kw)

    def _resolve(self, d: Directive, importer: Path) -> Directive:
        if d.specifier is None:
            return d
        target = resolve_specifier(d.specifier, importer)
        if target is None:
            self.result.externals.append(d.specifier)
            if d.is_relative:
                self._warn(
                    f"Unresolved relative import {d.specifier!r} in {importer.name}; "
                    "left as an external reference",
                    importer=str(importer),
                )
            else:
                log.debug(
                    "graph.external", specifier=d.specifier, importer=str(importer)
                )
        return dataclasses.replace(d, target=target)

    def visit(self, path: Path) -> None:
        if path in self._visited:
            return
        self._visited.add(path)

        try:
            source = _read_source(path)
        except (OSError, UnicodeDecodeError) as e:
            if path == self.entry:
                raise EntryModuleError(f"Cannot read entry module {path}: {e}") from e
            self._warn(f"Could not load module {path}: {e}", path=str(path))
            return

        self.graph.reserve(path)

        resolved: list[Directive] = []
        for d in scan_directives(source):
            if d.kind is DirectiveKind.UNSUPPORTED:
                self.result.unsupported += 1
                self._warn(
                    f"Unsupported directive left untouched in {path.name}: "
                    f"{d.text.strip()}",
                    path=str(path),
                )
                resolved.append(d)
                continue
            rd = self._resolve(d, path)
            resolved.append(rd)
            if rd.target is not None:
                self.visit(rd.target)

        self.graph.attach(
            SourceModule(path=path, source=source, directives=tuple(resolved))
        )

    def finish(self) -> GraphLoadResult:
        # Targets that exist on disk but failed to load are externals too.
        for m in list(self.graph):
            if all(t in self.graph for t in m.dependencies()):
                continue
            directives = tuple(
                dataclasses.replace(d, target=None)
                if d.target is not None and d.target not in self.graph
                else d
                for d in m.directives
            )
            self.graph.attach(dataclasses.replace(m, directives=directives))
        return self.result


def load_module_graph(entry: Path) -> GraphLoadResult:
    """
    Depth-first load of every module reachable from `entry` through relative
    directives. Each canonical path is loaded once.

    Raises EntryModuleError when the entry itself is missing or unreadable.
    """
    entry = Path(entry)
    if not entry.is_file():
        raise EntryModuleError(f"Entry module not found: {entry}")

    builder = _GraphBuilder(entry)
    builder.visit(builder.entry)
    result = builder.finish()

    log.debug(
        "graph.loaded",
        modules=len(result.graph),
        externals=len(result.externals),
        warnings=len(result.warnings),
    )
    return result
