"""Logging utilities."""

from __future__ import annotations

import contextlib
import contextvars
import logging
from typing import Any

from rich.logging import RichHandler


_source_var: contextvars.ContextVar[str] = contextvars.ContextVar("opml2cxl_source", default="-")


class _ContextFilter(logging.Filter):
    """Inject conversion context into log records."""

    def filter(self, record: logging.LogRecord) -> bool:  # noqa: A003
        record.source = _source_var.get()  # type: ignore[attr-defined]
        return True


@contextlib.contextmanager
def conversion_context(*, source: str) -> Any:
    """Temporarily bind the file being converted for structured logging.

    Args:
        source: Source document name.
    """

    token = _source_var.set(source)
    try:
        yield
    finally:
        _source_var.reset(token)


def configure_logging(level: str = "INFO") -> None:
    """Configure application logging.

    Args:
        level: Logging level name.
    """

    handler = RichHandler(rich_tracebacks=True, show_time=True, show_level=True)
    handler.addFilter(_ContextFilter())

    formatter = logging.Formatter(
        fmt="%(asctime)s %(levelname)s source=%(source)s %(name)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )
    handler.setFormatter(formatter)

    root = logging.getLogger()
    root.setLevel(level.upper())
    # Avoid duplicate handlers if configure_logging is called multiple times
    if not any(isinstance(h, RichHandler) for h in root.handlers):
        root.addHandler(handler)
    else:
        for h in root.handlers:
            if isinstance(h, RichHandler):
                if not any(isinstance(f, _ContextFilter) for f in h.filters):
                    h.addFilter(_ContextFilter())
                h.setFormatter(formatter)


def get_logger(name: str) -> logging.Logger:
    """Get a module logger."""

    return logging.getLogger(name)

