"""Structured logging configuration using structlog."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

import structlog


class _LogSink:
    """Write target handed to structlog's PrintLogger.

    Lines go to the configured log file, or otherwise to whatever
    ``sys.stderr`` is at the time of the write.  rich's Live display swaps
    ``sys.stderr`` for a proxy that prints above the live view, so warnings
    raised while browsing do not scribble over the alternate screen.  The
    sink object itself never changes, so loggers cached on first use stay
    valid across ``setup_logging``/``close_logging``.
    """

    def __init__(self) -> None:
        self._file: TextIO | None = None

    @property
    def file(self) -> TextIO | None:
        return self._file

    def open(self, path: str) -> None:
        self.close()
        if path:
            self._file = open(path, "a", encoding="utf-8")  # noqa: SIM115

    def close(self) -> None:
        file, self._file = self._file, None
        if file is not None:
            file.close()

    def write(self, text: str) -> int:
        return (self._file or sys.stderr).write(text)

    def flush(self) -> None:
        (self._file or sys.stderr).flush()


_sink = _LogSink()


def setup_logging(level: str = "warning", file: str = "") -> None:
    """Configure structlog for JSON output.

    Output goes to *file* (appended) when given, otherwise to stderr.
    Call ``close_logging`` on shutdown to release the file.
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)
    _sink.open(file)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso", utc=True, key="ts"),
            structlog.processors.JSONRenderer(),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(log_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=_sink),  # type: ignore[arg-type]
        cache_logger_on_first_use=True,
    )


def close_logging() -> None:
    """Close the log file, if any; later lines go to stderr."""
    _sink.close()


def get_logger(component: str) -> structlog.stdlib.BoundLogger:
    """Get a logger bound with a component name."""
    return structlog.get_logger(component=component)  # type: ignore[return-value]
