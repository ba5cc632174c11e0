from __future__ import annotations

from pathlib import Path
from typing import Any, Callable

import pytest
from site_bundler.core import Settings, get_logger

INDEX_HTML = """\
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <meta name="apple-mobile-web-app-status-bar-style" content="black">
    <link rel="stylesheet" href="dist/style.css">
</head>
<body>
    <script src="dist/main.js"></script>
</body>
</html>
"""

AR_INDEX_HTML = """\
<!DOCTYPE html>
<html lang="ar" dir="rtl">
<head>
    <meta name="apple-mobile-web-app-status-bar-style" content="black">
    <link rel="stylesheet" href="../dist/style.css?v=1">
</head>
<body>
    <script type="module" src="../dist/main.js"></script>
</body>
</html>
"""

MAIN_JS = """\
import themeManager from './themeManager.js';
import { track } from './analyticsTracker.js';

/* DEV-OVERLAY-START */
console.log('dev overlay');
/* DEV-OVERLAY-END */

// start the app
themeManager.apply('dark');
"""

THEME_MANAGER_JS = """\
const themes = ['light', 'dark'];

export default {
    apply(name) {
        document.documentElement.dataset.theme = name;
    },
    themes,
};
"""


def write(path: Path, text: str) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(text, encoding="utf-8")
    return path


@pytest.fixture
def site(tmp_path: Path) -> Path:
    """Minimal project: modular entry, modular styles and two documents."""
    root = tmp_path / "site"
    write(root / "src" / "main.js", MAIN_JS)
    write(root / "src" / "themeManager.js", THEME_MANAGER_JS)
    write(
        root / "src" / "styles" / "main.css",
        "@import './base.css';\n\nbody { color: black; }\n",
    )
    write(root / "src" / "styles" / "base.css", "* { box-sizing: border-box; }\n")
    write(root / "index.html", INDEX_HTML)
    write(root / "ar" / "index.html", AR_INDEX_HTML)
    return root


@pytest.fixture
def make_settings() -> Callable[..., Settings]:
    def _make(root: Path, **overrides: Any) -> Settings:
        return Settings(project_root=root, run_root=root / ".runs", **overrides)

    return _make


@pytest.fixture
def logger():
    return get_logger("site_bundler.tests")
