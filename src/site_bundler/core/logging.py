from __future__ import annotations

import logging
import sys
from typing import Any, Literal, Protocol, runtime_checkable

import structlog
from rich.logging import RichHandler
from structlog.contextvars import bind_contextvars, clear_contextvars, merge_contextvars

LogFormat = Literal["json", "console"]

_CONFIGURED = False


@runtime_checkable
class ILogger(Protocol):
    def debug(self, event: str, **kw: Any) -> Any: ...
    def info(self, event: str, **kw: Any) -> Any: ...
    def warning(self, event: str, **kw: Any) -> Any: ...
    def error(self, event: str, **kw: Any) -> Any: ...
    def exception(self, event: str, **kw: Any) -> Any: ...
    def bind(self, **kw: Any) -> "ILogger": ...


def _shared_processors() -> list[Any]:
    return [
        merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]


def _handler_for(fmt: LogFormat) -> tuple[logging.Handler, Any]:
    """
    console: rich handler + key=value lines (human terminal use)
    json:    plain stdout handler + one JSON object per line (CI logs)
    """
    if fmt == "console":
        handler: logging.Handler = RichHandler(
            rich_tracebacks=True,
            markup=False,
            show_time=False,
            show_path=False,
            console=None,
        )
        renderer: Any = structlog.processors.KeyValueRenderer(
            sort_keys=True, key_order=["event", "stage"], drop_missing=True
        )
    else:
        handler = logging.StreamHandler(stream=sys.stdout)
        renderer = structlog.processors.JSONRenderer()
    handler.setFormatter(logging.Formatter("%(message)s"))
    return handler, renderer


def configure_logging(
    *, level: str = "INFO", fmt: LogFormat = "console", force: bool = False
) -> None:
    global _CONFIGURED
    if _CONFIGURED and not force:
        return

    level_name = level.upper()
    if level_name not in logging.getLevelNamesMapping():
        raise ValueError(f"Unknown log level: {level}")
    level_no = logging.getLevelNamesMapping()[level_name]

    handler, renderer = _handler_for(fmt)
    handler.setLevel(level_no)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level_no)
    root.addHandler(handler)

    structlog.configure(
        processors=[*_shared_processors(), renderer],
        wrapper_class=structlog.make_filtering_bound_logger(level_no),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )

    _CONFIGURED = True


def get_logger(name: str = "site_bundler") -> structlog.stdlib.BoundLogger:
    return structlog.get_logger(name)


def bind(**values: Any) -> None:
    bind_contextvars(**values)


def clear_bindings() -> None:
    clear_contextvars()
