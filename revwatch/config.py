"""Configuration loading from environment variables."""

from __future__ import annotations

import os

from revwatch.models.config import (
    DisplayConfig,
    DisplayMode,
    LogConfig,
    RevwatchConfig,
    SessionConfig,
    WatchConfig,
)


def _env(key: str, default: str = "") -> str:
    return os.environ.get(f"REVWATCH_{key}", default)


def _env_bool(key: str, default: bool = False) -> bool:
    val = _env(key, str(default).lower())
    return val.lower() in ("true", "1", "yes")


def _env_int(key: str, default: int, min_val: int | None = None, max_val: int | None = None) -> int:
    val = int(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    if max_val is not None:
        val = min(val, max_val)
    return val


def _env_float(key: str, default: float, min_val: float | None = None) -> float:
    val = float(_env(key, str(default)))
    if min_val is not None:
        val = max(val, min_val)
    return val


def validate_log_level(value: str) -> str:
    valid = {"debug", "info", "warning", "error"}
    if value.lower() not in valid:
        raise ValueError(f"Invalid log level: {value}. Must be one of {valid}")
    return value.lower()


def validate_mode(value: str) -> DisplayMode:
    try:
        return DisplayMode(value.lower())
    except ValueError:
        valid = {m.value for m in DisplayMode}
        raise ValueError(f"Invalid display mode: {value}. Must be one of {valid}") from None


def load_config() -> RevwatchConfig:
    """Load configuration from REVWATCH_* environment variables.

    The watched path has no environment default; the CLI fills it in.
    """
    return RevwatchConfig(
        watch=WatchConfig(
            path=_env("WATCH_PATH", ""),
            debounce_ms=_env_int("WATCH_DEBOUNCE_MS", 50, min_val=0, max_val=5000),
            polling=_env_bool("WATCH_POLLING", False),
            encoding=_env("WATCH_ENCODING", "utf-8"),
        ),
        display=DisplayConfig(
            mode=validate_mode(_env("DISPLAY_MODE", "browse")),
            clear=_env_bool("DISPLAY_CLEAR", False),
            diff_command=_env("DISPLAY_DIFF_COMMAND", "delta"),
            context_lines=_env_int("DISPLAY_CONTEXT_LINES", 3, min_val=0, max_val=50),
        ),
        session=SessionConfig(
            refresh_interval=_env_float("SESSION_REFRESH_INTERVAL", 1.0, min_val=0.0),
            max_read_failures=_env_int("SESSION_MAX_READ_FAILURES", 5, min_val=0, max_val=1000),
        ),
        log=LogConfig(
            level=validate_log_level(_env("LOG_LEVEL", "warning")),
            file=_env("LOG_FILE", ""),
        ),
    )
