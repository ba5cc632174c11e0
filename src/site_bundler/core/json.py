import json
from pathlib import Path
from typing import Any, Callable, Optional

from .fs import atomic_write_text


def pretty_json(obj: Any, *, default: Optional[Callable[[Any], Any]] = None) -> str:
    """Two-space indented JSON with a trailing newline, non-ASCII kept as-is."""
    return json.dumps(obj, ensure_ascii=False, indent=2, default=default) + "\n"


def atomic_write_json(
    path: Path, obj: Any, *, default: Optional[Callable[[Any], Any]] = None
) -> None:
    atomic_write_text(path, pretty_json(obj, default=default))
