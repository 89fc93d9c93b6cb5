"""The watching session: a single consumer loop over one event queue.

Change notifications, key commands and quit requests all land on the same
``asyncio.Queue``.  The loop waits on it with a timeout, so it sleeps until
something happens and still wakes up periodically to refresh the display.
Everything that touches the VersionStore runs here, one item at a time and
in arrival order, so the store needs no locking.
"""

from __future__ import annotations

import asyncio

from revwatch.diff import compute
from revwatch.errors import ReadFailure
from revwatch.feed.base import ChangeFeed
from revwatch.history.store import VersionStore
from revwatch.models.diff import DiffScript
from revwatch.models.events import ChangeEvent, ChangeKind, Command
from revwatch.models.snapshot import RecordOutcome
from revwatch.observability.logging import get_logger
from revwatch.presentation.base import Presenter, RecordedChange, RenderFrame

_logger = get_logger("session")

_QueueItem = ChangeEvent | Command


class WatchSession:
    """Owns the control loop for one watched file.

    Args:
        store:             Seeded VersionStore; owned by this session.
        feed:              Change feed used to re-read the file on notification.
        presenter:         Where frames and recorded changes are shown.
        refresh_interval:  Seconds between idle re-renders; 0 disables them.
        max_read_failures: Consecutive read failures before ``run`` re-raises
                           the last ReadFailure; 0 keeps watching forever.
    """

    def __init__(
        self,
        store: VersionStore,
        feed: ChangeFeed,
        presenter: Presenter,
        refresh_interval: float = 1.0,
        max_read_failures: int = 5,
    ) -> None:
        self._store = store
        self._feed = feed
        self._presenter = presenter
        self._refresh_interval = refresh_interval if refresh_interval > 0 else None
        self._max_read_failures = max_read_failures
        self._queue: asyncio.Queue[_QueueItem] = asyncio.Queue()
        self._read_failures = 0
        self._frame_diff: tuple[int, DiffScript] | None = None

    @property
    def store(self) -> VersionStore:
        return self._store

    # ------------------------------------------------------------------
    # Producers (called from the event loop thread)
    # ------------------------------------------------------------------

    def post_change(self, event: ChangeEvent) -> None:
        """Queue a change notification; non-data events are ignored."""
        if event.kind is ChangeKind.DATA_MODIFIED:
            self._queue.put_nowait(event)

    def post_command(self, command: Command) -> None:
        self._queue.put_nowait(command)

    def request_quit(self) -> None:
        """Ask the loop to exit.  Safe to call from a signal handler."""
        self._queue.put_nowait(Command.QUIT)

    # ------------------------------------------------------------------
    # Loop
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Process queued items until a quit command arrives.

        Raises ReadFailure when ``max_read_failures`` consecutive re-reads fail.
        """
        await self.render()
        while True:
            try:
                item = await asyncio.wait_for(self._queue.get(), timeout=self._refresh_interval)
            except TimeoutError:
                await self.render()
                continue

            if isinstance(item, ChangeEvent):
                await self.handle_change(item)
            elif item is Command.QUIT:
                _logger.info("session_quit", versions=len(self._store))
                return
            else:
                await self.handle_command(item)

    async def handle_change(self, event: ChangeEvent) -> RecordOutcome | None:
        """Re-read the file and record it.  Returns None when the read failed."""
        try:
            content = self._feed.read_current()
        except ReadFailure as exc:
            self._read_failures += 1
            _logger.warning(
                "read_failed",
                path=exc.path,
                error=str(exc.cause),
                consecutive=self._read_failures,
            )
            await self._presenter.report_error(str(exc))
            if self._max_read_failures and self._read_failures >= self._max_read_failures:
                _logger.error("read_failures_exhausted", path=exc.path, limit=self._max_read_failures)
                raise
            return None
        self._read_failures = 0

        previous = None if self._store.is_empty else self._store.latest()
        outcome = self._store.record(content)
        if not outcome.appended:
            return outcome

        assert outcome.index is not None
        latest = self._store[outcome.index]
        if previous is not None:
            # Large rewrites can take a while; keep the loop free meanwhile.
            script = await asyncio.to_thread(compute, previous.content, latest.content)
            _logger.info(
                "version_added",
                index=outcome.index,
                insertions=script.insertions,
                deletions=script.deletions,
                latency_ms=round((latest.captured_at - event.observed_at) * 1000.0, 1),
            )
            await self._presenter.show_change(
                RecordedChange(index=outcome.index, previous=previous, latest=latest, script=script)
            )
        await self.render()
        return outcome

    async def handle_command(self, command: Command) -> int:
        """Apply a navigation command and re-render.  Returns the new cursor."""
        if command is Command.ADVANCE:
            cursor = self._store.advance()
        elif command is Command.RETREAT:
            cursor = self._store.retreat()
        else:
            return self._store.cursor
        _logger.debug("cursor_moved", command=command.value, cursor=cursor, versions=len(self._store))
        await self.render()
        return cursor

    # ------------------------------------------------------------------
    # Frames
    # ------------------------------------------------------------------

    def frame(self) -> RenderFrame:
        """Build the browsing frame for the current cursor position."""
        store = self._store
        current = store.current()
        nxt = store.peek_next()
        script = None
        if nxt is not None and self._presenter.wants_frame_diff:
            script = self._diff_at(store.cursor)
        return RenderFrame(index=store.cursor, total=len(store), current=current, next=nxt, script=script)

    async def render(self) -> None:
        if self._store.is_empty:
            return
        await self._presenter.render(self.frame())

    def _diff_at(self, index: int) -> DiffScript:
        """Diff of ``index -> index + 1``; the most recent one is cached."""
        if self._frame_diff is not None and self._frame_diff[0] == index:
            return self._frame_diff[1]
        script = compute(self._store[index].content, self._store[index + 1].content)
        self._frame_diff = (index, script)
        return script
