from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from site_bundler.core import relpath_posix
from site_bundler.stages.graph import Directive, DirectiveKind, ModuleGraph, SourceModule

REGISTRY = "__bundle_registry"
CACHE = "__bundle_cache"
LOADER = "__bundle_load"
REEXPORT = "__bundle_reexport"

RUNTIME_PREAMBLE = f"""\
const {REGISTRY} = new Map();
const {CACHE} = new Map();

function {LOADER}(id) {{
    const cached = {CACHE}.get(id);
    if (cached) {{
        return cached.exports;
    }}
    const factory = {REGISTRY}.get(id);
    if (!factory) {{
        throw new Error('Module not found: ' + id);
    }}
    const module = {{ exports: {{}} }};
    {CACHE}.set(id, module);
    factory(module, module.exports);
    return module.exports;
}}"""


@dataclass(frozen=True, slots=True)
class _Rewrite:
    start: int
    end: int
    text: str


def _load(mid: int) -> str:
    return f"{LOADER}({mid})"


def _external(d: Directive) -> str:
    """
    Keep the original statement visible but inert; its bindings are then
    looked up on the global scope at runtime.
    """
    return "\n".join(f"// external: {line}" for line in d.text.splitlines())


def _rewrite_import(d: Directive, mid: int) -> str:
    if not d.bindings and d.namespace is None:
        return f"{_load(mid)};"

    stmts: list[str] = []
    source = _load(mid)
    if d.namespace is not None:
        stmts.append(f"const {d.namespace} = {source};")
        source = d.namespace

    named: list[str] = []
    for b in d.bindings:
        if b.name == "default":
            stmts.append(f"const {b.bound} = {source}.default;")
        elif b.alias is None:
            named.append(b.name)
        else:
            named.append(f"{b.name}: {b.alias}")
    if named:
        stmts.append(f"const {{ {', '.join(named)} }} = {source};")
    return " ".join(stmts)


def _rewrite_export_from(d: Directive, mid: int) -> str:
    assigns = " ".join(
        f"exports.{b.bound} = {REEXPORT}.{b.name};" for b in d.bindings
    )
    return f"{{ const {REEXPORT} = {_load(mid)}; {assigns} }}"


def _rewrite_export_all(d: Directive, mid: int) -> str:
    if d.namespace is not None:
        return f"exports.{d.namespace} = {_load(mid)};"
    return (
        f"{{ const {REEXPORT} = {_load(mid)}; "
        f"for (const key of Object.keys({REEXPORT})) {{ "
        f"if (key !== 'default') exports[key] = {REEXPORT}[key]; }} }}"
    )


def transform_module(module: SourceModule, graph: ModuleGraph) -> str:
    """
    Rewrite one module's directives into registry calls and `exports`
    assignments. Local exports (declarations and export lists) are assigned
    after the module body, so a list may precede the bindings it names.
    """
    rewrites: list[_Rewrite] = []
    trailer: list[str] = []

    for d in module.directives:
        if d.kind is DirectiveKind.UNSUPPORTED:
            continue

        if d.specifier is not None:
            mid = graph.id_of(d.target) if d.target is not None else None
            if mid is None:
                text = _external(d)
            elif d.kind is DirectiveKind.IMPORT:
                text = _rewrite_import(d, mid)
            elif d.kind is DirectiveKind.EXPORT_FROM:
                text = _rewrite_export_from(d, mid)
            elif d.kind is DirectiveKind.EXPORT_ALL:
                text = _rewrite_export_all(d, mid)
            else:
                raise ValueError(f"Unexpected specifier on {d.kind} directive")
        elif d.kind is DirectiveKind.EXPORT_DEFAULT:
            if d.name is not None:
                text = ""
                trailer.append(f"exports.default = {d.name};")
            else:
                text = "exports.default = "
        elif d.kind is DirectiveKind.EXPORT_DECLARATION:
            text = ""
            trailer.extend(f"exports.{b.name} = {b.name};" for b in d.bindings)
        elif d.kind is DirectiveKind.EXPORT_LIST:
            text = ""
            trailer.extend(f"exports.{b.bound} = {b.name};" for b in d.bindings)
        else:
            raise ValueError(f"Unhandled directive kind: {d.kind}")

        rewrites.append(_Rewrite(d.start, d.end, text))

    out = module.source
    for rw in sorted(rewrites, key=lambda r: r.start, reverse=True):
        out = out[: rw.start] + rw.text + out[rw.end :]

    out = out.rstrip()
    if trailer:
        out = out + "\n" + "\n".join(trailer)
    return out


def emit_bundle(graph: ModuleGraph, *, base_dir: Path | None = None) -> str:
    """
    Emit one self-executing script: runtime preamble, one registered
    initializer per module, then the entry bootstrap call.

    Output depends only on module sources and discovery order.
    """
    base = base_dir if base_dir is not None else graph.entry.parent
    parts: list[str] = [
        "// ES module bundle",
        "(function () {",
        "'use strict';",
        "",
        RUNTIME_PREAMBLE,
        "",
    ]

    for module in graph:
        mid = graph.id_of(module.path)
        body = transform_module(module, graph)
        parts.append(f"// Module {mid}: {relpath_posix(module.path, base)}")
        parts.append(f"{REGISTRY}.set({mid}, function (module, exports) {{")
        parts.append(body)
        parts.append("});")
        parts.append("")

    parts.append("// Bootstrap entry module")
    parts.append(f"{_load(graph.entry_id)};")
    parts.append("})();")
    return "\n".join(parts) + "\n"
