"""Presenter contract and the values handed to presenters."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass

from revwatch.models.diff import DiffScript
from revwatch.models.snapshot import Snapshot


@dataclass(frozen=True)
class RenderFrame:
    """Everything a presenter needs to draw the browsing view."""

    index: int
    total: int
    current: Snapshot
    next: Snapshot | None = None
    script: DiffScript | None = None  # current -> next, when requested


@dataclass(frozen=True)
class RecordedChange:
    """A newly recorded version and its diff against the one before it."""

    index: int
    previous: Snapshot
    latest: Snapshot
    script: DiffScript


class Presenter(ABC):
    """Abstract base class for all presenters.

    Only ``presenter_name`` is mandatory; the display hooks default to
    no-ops so a presenter implements just what it shows.  ``render`` and
    ``show_change`` should not raise: failures are logged inside the
    implementation and never affect the version history.
    """

    #: Ask the session to attach a current -> next DiffScript to each frame.
    wants_frame_diff: bool = False

    @property
    @abstractmethod
    def presenter_name(self) -> str:
        """Identifier used in logs."""

    async def start(self) -> None:
        """Acquire display resources (alternate screen, ...)."""

    async def stop(self) -> None:
        """Release display resources.  Safe to call more than once."""

    async def render(self, frame: RenderFrame) -> None:
        """Draw the browsing view for *frame*."""

    async def show_change(self, change: RecordedChange) -> None:
        """React to a newly recorded version."""

    async def report_error(self, message: str) -> None:
        """Surface an error to the user."""


def display_text(text: str) -> str:
    """Replace undecodable bytes (surrogate escapes) so a terminal can print *text*."""
    return text.encode("utf-8", "surrogateescape").decode("utf-8", "replace")
