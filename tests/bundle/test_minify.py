from __future__ import annotations

from site_bundler.stages.bundle import minify_js, strip_comments, strip_dev_overlay


def test_dev_overlay_is_replaced() -> None:
    code = "a();\n/* DEV-OVERLAY-START */\nshowGrid();\n/* DEV-OVERLAY-END */\nb();\n"
    out = strip_dev_overlay(code)
    assert "showGrid" not in out
    assert "// dev overlay stripped for production" in out


def test_comments_inside_literals_survive() -> None:
    code = (
        "const url = 'http://example.com'; // trailing\n"
        "/* block */const t = `/* not a comment */`;\n"
        'const s = "// nope";\n'
    )
    assert strip_comments(code) == (
        "const url = 'http://example.com'; \n"
        "const t = `/* not a comment */`;\n"
        'const s = "// nope";\n'
    )


def test_minify_js_collapses_blank_runs() -> None:
    code = (
        "// header\n"
        "a();   \n\n\n\n"
        "/* DEV-OVERLAY-START */x();/* DEV-OVERLAY-END */\n"
        "b();\n"
    )
    assert minify_js(code) == "a();\n\nb();\n"
