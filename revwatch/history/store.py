"""Append-only, de-duplicated version history with a browsing cursor.

The store is single-writer by construction: only the session's control loop
calls ``record``, ``advance`` and ``retreat``, so no locking is done here.

Cursor convention: once the history holds two or more snapshots, the last
one is reserved as the "next-only" target so that ``peek_next()`` always has
something to show.  Browsing therefore wraps within ``[0, len - 2]``.
"""

from __future__ import annotations

from collections.abc import Iterator

from revwatch.errors import EmptyHistoryError
from revwatch.models.snapshot import RecordOutcome, Snapshot
from revwatch.observability.logging import get_logger

_logger = get_logger("history.store")


class VersionStore:
    """Ordered history of distinct file contents.

    ``record`` is the only mutator of the history; ``advance`` and
    ``retreat`` only move the cursor.  Entries are never removed or
    reordered, and no two adjacent entries share the same content.
    """

    def __init__(self) -> None:
        self._history: list[Snapshot] = []
        self._cursor = 0

    # ------------------------------------------------------------------
    # Recording
    # ------------------------------------------------------------------

    def record(self, content: str) -> RecordOutcome:
        """Append *content* unless it equals the latest snapshot's content.

        The comparison is exact: no whitespace or encoding normalisation.
        """
        if self._history and self._history[-1].content == content:
            _logger.debug("version_unchanged", index=len(self._history) - 1)
            return RecordOutcome.unchanged()

        snapshot = Snapshot(content=content)
        self._history.append(snapshot)
        index = len(self._history) - 1
        _logger.debug("version_recorded", index=index, lines=snapshot.line_count)
        return RecordOutcome.appended_at(index)

    # ------------------------------------------------------------------
    # Navigation
    # ------------------------------------------------------------------

    def advance(self) -> int:
        """Move the cursor forward, wrapping past ``len - 2`` back to 0."""
        size = len(self._history)
        if size < 2:
            return self._cursor
        self._cursor = (self._cursor + 1) % (size - 1)
        return self._cursor

    def retreat(self) -> int:
        """Move the cursor back, wrapping from 0 to ``len - 2``."""
        size = len(self._history)
        if size < 2:
            return self._cursor
        self._cursor = self._cursor - 1 if self._cursor > 0 else size - 2
        return self._cursor

    @property
    def cursor(self) -> int:
        return self._cursor

    def current(self) -> Snapshot:
        """Return the snapshot under the cursor."""
        if not self._history:
            raise EmptyHistoryError("version store is empty; seed it before browsing")
        return self._history[self._cursor]

    def peek_next(self) -> Snapshot | None:
        """Return the snapshot right after the cursor, if any."""
        nxt = self._cursor + 1
        if nxt < len(self._history):
            return self._history[nxt]
        return None

    # ------------------------------------------------------------------
    # Read-only access
    # ------------------------------------------------------------------

    def latest(self) -> Snapshot:
        if not self._history:
            raise EmptyHistoryError("version store is empty")
        return self._history[-1]

    def previous_of(self, index: int) -> Snapshot | None:
        """Return the snapshot recorded just before *index*, if any."""
        if 0 < index < len(self._history):
            return self._history[index - 1]
        return None

    @property
    def is_empty(self) -> bool:
        return not self._history

    def __len__(self) -> int:
        return len(self._history)

    def __getitem__(self, index: int) -> Snapshot:
        return self._history[index]

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self._history)
