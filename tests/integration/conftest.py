"""Shared fixtures for revwatch integration tests.

Provides an in-memory change feed whose "file" is a settable string (or a
read error) and a presenter that records every call, so session tests can
exercise the full record → diff → present pipeline without a filesystem
watcher or a terminal.
"""

from __future__ import annotations

import pytest

from revwatch.errors import ReadFailure
from revwatch.feed.base import ChangeFeed, EventSink
from revwatch.history.store import VersionStore
from revwatch.models.events import ChangeEvent, ChangeKind
from revwatch.presentation.base import Presenter, RecordedChange, RenderFrame
from revwatch.session import WatchSession

# ---------------------------------------------------------------------------
# Fakes
# ---------------------------------------------------------------------------


class FakeFeed(ChangeFeed):
    """ChangeFeed whose file content is held in memory."""

    def __init__(self, content: str = "") -> None:
        super().__init__("/virtual/watched.txt")
        self.content = content
        self.error: Exception | None = None
        self.sink: EventSink | None = None
        self.reads = 0

    async def start(self, sink: EventSink) -> None:
        self.sink = sink

    async def stop(self) -> None:
        self.sink = None

    def read_current(self) -> str:
        self.reads += 1
        if self.error is not None:
            raise ReadFailure(self.path, self.error)
        return self.content

    def write(self, content: str) -> ChangeEvent:
        """Change the content and return the notification a watcher would emit."""
        self.content = content
        return ChangeEvent(kind=ChangeKind.DATA_MODIFIED, path=self.path)


class RecordingPresenter(Presenter):
    """Presenter that keeps every frame, change and error it receives."""

    def __init__(self, wants_frame_diff: bool = True) -> None:
        self.wants_frame_diff = wants_frame_diff
        self.frames: list[RenderFrame] = []
        self.changes: list[RecordedChange] = []
        self.errors: list[str] = []

    @property
    def presenter_name(self) -> str:
        return "recording"

    async def render(self, frame: RenderFrame) -> None:
        self.frames.append(frame)

    async def show_change(self, change: RecordedChange) -> None:
        self.changes.append(change)

    async def report_error(self, message: str) -> None:
        self.errors.append(message)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def feed() -> FakeFeed:
    return FakeFeed()


@pytest.fixture
def presenter() -> RecordingPresenter:
    return RecordingPresenter()


def make_session(
    seed: str,
    feed: FakeFeed,
    presenter: Presenter,
    max_read_failures: int = 3,
    refresh_interval: float = 0.0,
) -> WatchSession:
    """Seed a store with *seed* and wrap it in a session."""
    store = VersionStore()
    store.record(seed)
    feed.content = seed
    return WatchSession(
        store=store,
        feed=feed,
        presenter=presenter,
        refresh_interval=refresh_interval,
        max_read_failures=max_read_failures,
    )
