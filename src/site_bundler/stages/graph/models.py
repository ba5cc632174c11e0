from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum
from pathlib import Path
from typing import Iterator, Optional


class DirectiveKind(StrEnum):
    IMPORT = "import"
    EXPORT_DEFAULT = "export_default"
    EXPORT_DECLARATION = "export_declaration"
    EXPORT_LIST = "export_list"
    EXPORT_FROM = "export_from"
    EXPORT_ALL = "export_all"
    UNSUPPORTED = "unsupported"


@dataclass(frozen=True, slots=True)
class Binding:
    """
    One term of an import/export list.

    `name` is the identifier on the providing side, `alias` the optional
    rename (`name as alias`). `bound` is the identifier that ends up defined.
    """

    name: str
    alias: Optional[str] = None

    @property
    def bound(self) -> str:
        return self.alias or self.name


@dataclass(frozen=True, slots=True)
class Directive:
    """
    A dependency directive found in module source.

    `start`/`end` delimit the text the bundle emitter replaces. For default and
    declaration exports the span only covers the `export [default]` keywords.
    """

    kind: DirectiveKind
    start: int
    end: int
    text: str
    specifier: Optional[str] = None
    bindings: tuple[Binding, ...] = ()
    namespace: Optional[str] = None
    name: Optional[str] = None
    target: Optional[Path] = None

    @property
    def is_relative(self) -> bool:
        return self.specifier is not None and self.specifier.startswith(
            ("./", "../")
        )

    @property
    def is_external(self) -> bool:
        """Has a specifier that did not resolve to a module in the graph."""
        return self.specifier is not None and self.target is None


@dataclass(frozen=True, slots=True)
class SourceModule:
    path: Path
    source: str
    directives: tuple[Directive, ...] = ()

    def dependencies(self) -> list[Path]:
        return [d.target for d in self.directives if d.target is not None]


@dataclass(slots=True)
class ModuleGraph:
    """
    Modules keyed by canonical absolute path, in discovery order.

    Ids are dense, build-local and equal to the discovery rank; the entry
    module is always id 0.
    """

    entry: Path
    _modules: dict[Path, SourceModule] = field(default_factory=dict)
    _ids: dict[Path, int] = field(default_factory=dict)

    def reserve(self, path: Path) -> int:
        if path in self._ids:
            raise ValueError(f"Module registered twice: {path}")
        mid = len(self._ids)
        self._ids[path] = mid
        return mid

    def attach(self, module: SourceModule) -> None:
        if module.path not in self._ids:
            raise ValueError(f"Module was not reserved: {module.path}")
        self._modules[module.path] = module

    def id_of(self, path: Path) -> Optional[int]:
        return self._ids.get(path)

    def module(self, path: Path) -> SourceModule:
        return self._modules[path]

    @property
    def entry_id(self) -> int:
        mid = self._ids.get(self.entry)
        if mid is None:
            raise KeyError(f"Entry module missing from graph: {self.entry}")
        return mid

    def __contains__(self, path: object) -> bool:
        return path in self._modules

    def __len__(self) -> int:
        return len(self._modules)

    def __iter__(self) -> Iterator[SourceModule]:
        for p in self._ids:
            m = self._modules.get(p)
            if m is not None:
                yield m

    def paths(self) -> list[Path]:
        return [m.path for m in self]
