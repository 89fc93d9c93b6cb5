"""Configuration data structures."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import StrEnum


class DisplayMode(StrEnum):
    """Which presenter renders the history."""

    BROWSE = "browse"
    STREAM = "stream"
    EXTERNAL = "external"


@dataclass
class WatchConfig:
    """Change feed configuration."""

    path: str = ""
    debounce_ms: int = 50
    polling: bool = False
    encoding: str = "utf-8"


@dataclass
class DisplayConfig:
    """Presenter configuration."""

    mode: DisplayMode = DisplayMode.BROWSE
    clear: bool = False
    diff_command: str = "delta"
    context_lines: int = 3


@dataclass
class SessionConfig:
    """Control loop configuration."""

    refresh_interval: float = 1.0
    max_read_failures: int = 5  # consecutive; 0 means never give up


@dataclass
class LogConfig:
    """Logging configuration."""

    level: str = "warning"
    file: str = ""


@dataclass
class RevwatchConfig:
    """Top-level revwatch configuration."""

    watch: WatchConfig = field(default_factory=WatchConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    session: SessionConfig = field(default_factory=SessionConfig)
    log: LogConfig = field(default_factory=LogConfig)
