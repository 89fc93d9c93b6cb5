"""ChangeFeed backed by a watchdog observer.

watchdog watches directories, so the observer is scheduled on the file's
parent directory and every event is classified against the watched path.
Editors that save atomically write a temporary file and move it over the
original; that move is treated as a data modification of the watched file.

Observer callbacks run on watchdog's own thread and are handed to the event
loop with ``call_soon_threadsafe``; everything after that runs on the loop.
"""

from __future__ import annotations

import asyncio
import os

from watchdog.events import (
    EVENT_TYPE_CREATED,
    EVENT_TYPE_DELETED,
    EVENT_TYPE_MODIFIED,
    EVENT_TYPE_MOVED,
    FileSystemEvent,
    FileSystemEventHandler,
)
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver
from watchdog.observers.polling import PollingObserver

from revwatch.errors import FeedSetupError
from revwatch.feed.base import ChangeFeed, EventSink
from revwatch.models.events import ChangeEvent, ChangeKind
from revwatch.observability.logging import get_logger

_logger = get_logger("feed.watchdog")

_STOP_JOIN_TIMEOUT = 2.0


def _norm(path: str | bytes) -> str:
    return os.path.realpath(os.fsdecode(path))


def classify(event: FileSystemEvent, path: str) -> ChangeKind | None:
    """Map a watchdog event to a ChangeKind for *path*, or None if unrelated."""
    if event.is_directory:
        return None

    if event.event_type == EVENT_TYPE_MOVED:
        if _norm(event.dest_path) == path:
            return ChangeKind.DATA_MODIFIED
        if _norm(event.src_path) == path:
            return ChangeKind.MOVED
        return None

    if _norm(event.src_path) != path:
        return None
    if event.event_type in (EVENT_TYPE_MODIFIED, EVENT_TYPE_CREATED):
        return ChangeKind.DATA_MODIFIED
    if event.event_type == EVENT_TYPE_DELETED:
        return ChangeKind.DELETED
    return ChangeKind.METADATA  # opened / closed / attribute changes


class _Handler(FileSystemEventHandler):
    def __init__(self, feed: WatchdogChangeFeed) -> None:
        self._feed = feed

    def on_any_event(self, event: FileSystemEvent) -> None:
        kind = classify(event, self._feed.path)
        if kind is not None:
            self._feed._post(ChangeEvent(kind=kind, path=self._feed.path))


class WatchdogChangeFeed(ChangeFeed):
    """Delivers DATA_MODIFIED events for one file using watchdog.

    Args:
        path:        File to watch.
        encoding:    Encoding used by ``read_current``.
        debounce_ms: Bursts of events closer than this collapse into the last
                     one.  0 delivers every event.
        polling:     Use watchdog's PollingObserver instead of the native one
                     (network filesystems, containers without inotify).
    """

    def __init__(
        self,
        path: str,
        encoding: str = "utf-8",
        debounce_ms: int = 50,
        polling: bool = False,
    ) -> None:
        super().__init__(path, encoding)
        self._debounce = max(debounce_ms, 0) / 1000.0
        self._polling = polling
        self._observer: BaseObserver | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._sink: EventSink | None = None
        self._pending: asyncio.TimerHandle | None = None

    async def start(self, sink: EventSink) -> None:
        directory = os.path.dirname(self._path)
        if not os.path.isdir(directory):
            raise FeedSetupError(self._path, FileNotFoundError(f"directory not found: {directory}"))

        self._loop = asyncio.get_running_loop()
        self._sink = sink
        observer = PollingObserver() if self._polling else Observer()
        try:
            observer.schedule(_Handler(self), directory, recursive=False)
            observer.start()
        except OSError as exc:
            raise FeedSetupError(self._path, exc) from exc
        self._observer = observer
        _logger.info("feed_started", path=self._path, polling=self._polling, debounce_s=self._debounce)

    async def stop(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        observer, self._observer = self._observer, None
        if observer is None:
            return
        observer.stop()
        await asyncio.to_thread(observer.join, _STOP_JOIN_TIMEOUT)
        _logger.info("feed_stopped", path=self._path)

    # ------------------------------------------------------------------
    # Event delivery
    # ------------------------------------------------------------------

    def _post(self, event: ChangeEvent) -> None:
        """Called from the observer thread."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        loop.call_soon_threadsafe(self._on_event, event)

    def _on_event(self, event: ChangeEvent) -> None:
        if event.kind is not ChangeKind.DATA_MODIFIED:
            _logger.debug("feed_event_dropped", kind=event.kind.value, path=event.path)
            return
        if self._debounce <= 0:
            self._deliver(event)
            return
        if self._pending is not None:
            self._pending.cancel()
        assert self._loop is not None
        self._pending = self._loop.call_later(self._debounce, self._deliver, event)

    def _deliver(self, event: ChangeEvent) -> None:
        self._pending = None
        if self._sink is not None and self._observer is not None:
            self._sink(event)
