from __future__ import annotations

from pathlib import Path

from site_bundler.core import ProjectLayout, Settings
from site_bundler.stages.styles import (
    StyleSourceKind,
    aggregate_styles,
    resolve_style_source,
)


def _w(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


def test_imports_are_inlined_recursively(tmp_path: Path) -> None:
    root = _w(
        tmp_path / "main.css",
        "@import './base.css';\n@import url(components/button.css);\nbody{}\n",
    )
    _w(tmp_path / "base.css", "html{}\n")
    _w(
        tmp_path / "components" / "button.css",
        '@import "../tokens.css";\n.btn{}\n',
    )
    _w(tmp_path / "tokens.css", ":root{}\n")

    res = aggregate_styles(root)
    assert res.kind is StyleSourceKind.MODULAR
    assert res.content == (
        "/* Imported from ./base.css */\nhtml{}\n\n"
        "/* Imported from components/button.css */\n"
        "/* Imported from ../tokens.css */\n:root{}\n\n.btn{}\n\n"
        "body{}\n"
    )
    assert res.warnings == []
    assert len(res.included) == 3


def test_media_conditions_are_kept(tmp_path: Path) -> None:
    root = _w(
        tmp_path / "main.css",
        "@import './print.css' print;\n"
        "@import url(wide.css) screen and (min-width: 900px);\n"
        "@import './layered.css' layer(base);\n",
    )
    _w(tmp_path / "print.css", "nav{display:none}\n")
    _w(tmp_path / "wide.css", ".grid{}\n")
    _w(tmp_path / "layered.css", ".x{}\n")

    res = aggregate_styles(root)
    assert res.content == (
        "/* Imported from ./print.css (print) */\n"
        "@media print {\nnav{display:none}\n\n}\n"
        "/* Imported from wide.css (screen and (min-width: 900px)) */\n"
        "@media screen and (min-width: 900px) {\n.grid{}\n\n}\n"
        "@import './layered.css' layer(base);\n"
    )
    assert len(res.warnings) == 1
    assert "layer(base)" in res.warnings[0]
    assert len(res.included) == 2


def test_missing_remote_and_cyclic_imports_are_left(tmp_path: Path) -> None:
    root = _w(
        tmp_path / "main.css",
        "@import 'https://fonts.example/css';\n"
        "@import './gone.css';\n"
        "@import './a.css';\n",
    )
    _w(tmp_path / "a.css", "@import './main.css';\n.a{}\n")

    res = aggregate_styles(root)
    assert "@import 'https://fonts.example/css';" in res.content
    assert "@import './gone.css';" in res.content
    assert "@import './main.css';" in res.content
    assert ".a{}" in res.content
    assert len(res.warnings) == 2
    assert any("not found" in w for w in res.warnings)
    assert any("Circular" in w for w in res.warnings)


def test_fallback_chain(tmp_path: Path) -> None:
    layout = ProjectLayout.from_settings(Settings(project_root=tmp_path))
    assert resolve_style_source(layout) is None

    _w(tmp_path / "dist" / "style.css", "/* old */\n")
    res = resolve_style_source(layout)
    assert res is not None and res.kind is StyleSourceKind.EXISTING

    _w(tmp_path / "css" / "style.css", "@import './ignored.css';\n")
    res = resolve_style_source(layout)
    assert res is not None and res.kind is StyleSourceKind.LEGACY
    # legacy stylesheets are used verbatim
    assert res.content == "@import './ignored.css';\n"

    _w(tmp_path / "src" / "styles" / "main.css", "p{}\n")
    res = resolve_style_source(layout)
    assert res is not None and res.kind is StyleSourceKind.MODULAR
    assert res.content == "p{}\n"
