from __future__ import annotations

import secrets
from dataclasses import dataclass, field
from typing import Optional

from .time import monotonic_ms


def new_build_id() -> str:
    """Random per-invocation build identifier (10 hex chars)."""
    return secrets.token_hex(5)


@dataclass(slots=True)
class Timer:
    """
    Minimal timing primitive. Use as context manager.

      with Timer() as t:
          ...
      duration = t.duration_ms
    """

    _t0_ms: int = field(default_factory=monotonic_ms, init=False)
    duration_ms: Optional[int] = field(default=None, init=False)

    def __enter__(self) -> "Timer":
        self._t0_ms = monotonic_ms()
        self.duration_ms = None
        return self

    def __exit__(self, *exc: object) -> None:
        self.duration_ms = monotonic_ms() - self._t0_ms
