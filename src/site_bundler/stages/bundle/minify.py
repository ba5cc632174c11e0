from __future__ import annotations

import re

_DEV_OVERLAY = re.compile(
    r"/\* DEV-OVERLAY-START \*/.*?/\* DEV-OVERLAY-END \*/", re.DOTALL
)
_TRAILING_WS = re.compile(r"[ \t]+$", re.MULTILINE)
_BLANK_RUNS = re.compile(r"\n{3,}")

DEV_OVERLAY_PLACEHOLDER = "\n// dev overlay stripped for production\n"


def strip_dev_overlay(code: str) -> str:
    """Remove every DEV-OVERLAY-START ... DEV-OVERLAY-END block."""
    return _DEV_OVERLAY.sub(DEV_OVERLAY_PLACEHOLDER, code)


def strip_comments(code: str) -> str:
    """
    Remove `//` and `/* */` comments that sit outside string and template
    literals. Regex literals containing `//` are not recognised.
    """
    out: list[str] = []
    i = 0
    n = len(code)
    quote: str | None = None

    while i < n:
        ch = code[i]

        if quote is not None:
            out.append(ch)
            if ch == "\\" and i + 1 < n:
                out.append(code[i + 1])
                i += 2
                continue
            if ch == quote:
                quote = None
            i += 1
            continue

        if ch in ("'", '"', "`"):
            quote = ch
            out.append(ch)
            i += 1
            continue

        if code.startswith("//", i):
            nl = code.find("\n", i)
            i = n if nl < 0 else nl
            continue

        if code.startswith("/*", i):
            close = code.find("*/", i + 2)
            i = n if close < 0 else close + 2
            continue

        out.append(ch)
        i += 1

    return "".join(out)


def collapse_whitespace(code: str) -> str:
    code = _TRAILING_WS.sub("", code)
    code = _BLANK_RUNS.sub("\n\n", code)
    return code.strip() + "\n"


def minify_js(code: str) -> str:
    """
    Production post-processing: dev overlay, comments, redundant blank lines.
    """
    return collapse_whitespace(strip_comments(strip_dev_overlay(code)))
