"""Presentation layer for revwatch.

Exports:
    Presenter             -- Abstract base for all presenters.
    RenderFrame           -- Browsing view: index, total, current, next, diff.
    RecordedChange        -- A new version plus its diff to the previous one.
    BrowsePresenter       -- rich side-by-side browser (default).
    StreamPresenter       -- rich unified diff per recorded version.
    ExternalDiffPresenter -- Runs an external pairwise-diff program.
    build_presenter       -- Factory used by the application bootstrap.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from revwatch.models.config import DisplayMode
from revwatch.presentation.base import Presenter, RecordedChange, RenderFrame
from revwatch.presentation.browse import BrowsePresenter
from revwatch.presentation.external import ExternalDiffPresenter
from revwatch.presentation.stream import StreamPresenter

if TYPE_CHECKING:
    from rich.console import Console

    from revwatch.models.config import DisplayConfig

__all__ = [
    "BrowsePresenter",
    "ExternalDiffPresenter",
    "Presenter",
    "RecordedChange",
    "RenderFrame",
    "StreamPresenter",
    "build_presenter",
]


def build_presenter(
    config: DisplayConfig,
    encoding: str = "utf-8",
    console: Console | None = None,
) -> Presenter:
    """Build the presenter selected by ``config.mode``."""
    if config.mode == DisplayMode.STREAM:
        return StreamPresenter(console=console, clear=config.clear, context=config.context_lines)
    if config.mode == DisplayMode.EXTERNAL:
        return ExternalDiffPresenter(
            command=config.diff_command,
            console=console,
            clear=config.clear,
            encoding=encoding,
        )
    return BrowsePresenter(console=console)
