"""Observability helpers (structured logging)."""

from revwatch.observability.logging import close_logging, get_logger, setup_logging

__all__ = ["close_logging", "get_logger", "setup_logging"]
