from __future__ import annotations

import json
import re
import shutil
import subprocess
from pathlib import Path

import pytest
from site_bundler.stages.bundle import emit_bundle, transform_module
from site_bundler.stages.graph import load_module_graph


def _w(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_entry_and_dependency_are_registered(site: Path) -> None:
    graph = load_module_graph(site / "src" / "main.js").graph
    code = emit_bundle(graph)

    assert code.count("__bundle_registry.set(") == 2
    assert "// Module 0: main.js" in code
    assert "// Module 1: themeManager.js" in code
    assert "const themeManager = __bundle_load(1).default;" in code
    # the missing module stays a global lookup
    assert "// external: import { track } from './analyticsTracker.js';" in code
    assert "exports.default = {" in code

    # bootstrap comes after every registration
    assert code.rstrip().endswith("__bundle_load(0);\n})();")
    assert code.rindex("__bundle_registry.set(") < code.rindex("__bundle_load(0);")


def test_output_is_deterministic(site: Path) -> None:
    a = emit_bundle(load_module_graph(site / "src" / "main.js").graph)
    b = emit_bundle(load_module_graph(site / "src" / "main.js").graph)
    assert a == b


def test_export_rewrites(tmp_path: Path) -> None:
    _w(
        tmp_path / "main.js",
        "import helper, { a as alpha, b } from './lib.js';\n"
        "import * as all from './lib.js';\n"
        "export { alpha as first, b };\n"
        "export { c as third } from './lib.js';\n"
        "export * from './lib.js';\n",
    )
    _w(
        tmp_path / "lib.js",
        "export const a = 1;\n"
        "export let b = 2;\n"
        "export function c() { return 3; }\n"
        "export default class Helper {}\n",
    )
    graph = load_module_graph(tmp_path / "main.js").graph
    main = transform_module(graph.module(graph.entry), graph)
    lib = transform_module(graph.module(graph.paths()[1]), graph)

    assert (
        "const helper = __bundle_load(1).default; "
        "const { a: alpha, b } = __bundle_load(1);"
    ) in main
    assert "const all = __bundle_load(1);" in main
    assert "exports.third = __bundle_reexport.c;" in main
    assert "if (key !== 'default') exports[key] = __bundle_reexport[key];" in main
    assert re.search(r"^\s*export\b", main, re.MULTILINE) is None
    assert main.splitlines()[-2:] == ["exports.first = alpha;", "exports.b = b;"]

    assert lib.splitlines() == [
        "const a = 1;",
        "let b = 2;",
        "function c() { return 3; }",
        "class Helper {}",
        "exports.a = a;",
        "exports.b = b;",
        "exports.c = c;",
        "exports.default = Helper;",
    ]


def test_unsupported_directive_left_untouched(tmp_path: Path) -> None:
    _w(tmp_path / "main.js", "export const { a } = obj;\n")
    graph = load_module_graph(tmp_path / "main.js").graph
    assert transform_module(graph.module(graph.entry), graph) == (
        "export const { a } = obj;"
    )


def test_local_exports_are_assigned_after_the_body(tmp_path: Path) -> None:
    _w(
        tmp_path / "main.js",
        "export { helper, limit as max };\n"
        "const helper = () => 7;\n"
        "export const a = 1, b = [2, 3], c = { d: 4 };\n"
        "const limit = 10;\n",
    )
    graph = load_module_graph(tmp_path / "main.js").graph
    out = transform_module(graph.module(graph.entry), graph)

    lines = out.splitlines()
    assert lines[-5:] == [
        "exports.helper = helper;",
        "exports.max = limit;",
        "exports.a = a;",
        "exports.b = b;",
        "exports.c = c;",
    ]
    assert out.index("const limit = 10;") < out.index("exports.max = limit;")


def _run_node(tmp_path: Path) -> dict:
    bundle = _w(
        tmp_path / "bundle.js",
        emit_bundle(load_module_graph(tmp_path / "main.js").graph),
    )
    proc = subprocess.run(
        ["node", str(bundle)], capture_output=True, text=True, check=True, timeout=30
    )
    return json.loads(proc.stdout)


@pytest.mark.skipif(shutil.which("node") is None, reason="node is not installed")
def test_bundle_runs_with_comment_markers_in_strings(tmp_path: Path) -> None:
    _w(
        tmp_path / "main.js",
        "const glob = 'assets/*';\n"
        "import x, { a, b } from './lib.js';\n"
        "console.log(JSON.stringify({ glob, x, a, b })); /* done */\n",
    )
    _w(
        tmp_path / "lib.js",
        "export { x as default };\n"
        "export const a = 1, b = 2;\n"
        "const x = 7;\n",
    )
    assert _run_node(tmp_path) == {"glob": "assets/*", "x": 7, "a": 1, "b": 2}


@pytest.mark.skipif(shutil.which("node") is None, reason="node is not installed")
def test_each_module_evaluates_once(tmp_path: Path) -> None:
    _w(
        tmp_path / "main.js",
        "import { hits } from './counter.js';\n"
        "import left from './left.js';\n"
        "import right from './right.js';\n"
        "console.log(JSON.stringify({ hits: hits(), left, right, evals: globalThis.__evals }));\n",
    )
    _w(
        tmp_path / "counter.js",
        "globalThis.__evals = (globalThis.__evals || 0) + 1;\n"
        "let n = 0;\n"
        "export function hits() { n += 1; return n; }\n",
    )
    _w(
        tmp_path / "left.js",
        "import { hits } from './counter.js';\nexport default hits();\n",
    )
    _w(
        tmp_path / "right.js",
        "import { hits } from './counter.js';\nexport default hits();\n",
    )
    assert _run_node(tmp_path) == {"hits": 3, "left": 1, "right": 2, "evals": 1}
