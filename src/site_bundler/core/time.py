import time
from datetime import datetime, timezone


def utc_now_iso() -> str:
    """UTC timestamp with millisecond precision, e.g. 2026-01-01T00:00:00.000Z."""
    now = datetime.now(timezone.utc)
    return now.strftime("%Y-%m-%dT%H:%M:%S.") + f"{now.microsecond // 1000:03d}Z"


def monotonic_ms() -> int:
    return time.perf_counter_ns() // 1_000_000
