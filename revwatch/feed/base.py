"""Change feed contract.

A ChangeFeed turns raw filesystem notifications into ``ChangeEvent`` objects
of kind DATA_MODIFIED and hands them to a sink on the event-loop thread.  It
never records versions itself: the session calls ``read_current()`` and
decides what to do with the content.
"""

from __future__ import annotations

import os
from abc import ABC, abstractmethod
from collections.abc import Callable
from pathlib import Path

from revwatch.errors import ReadFailure
from revwatch.models.events import ChangeEvent

EventSink = Callable[[ChangeEvent], None]


def read_text(path: str, encoding: str = "utf-8") -> str:
    """Read *path* fully, keeping undecodable bytes as surrogate escapes.

    Two files with different bytes never decode to the same string, so the
    VersionStore's exact comparison stays byte-exact.

    Raises ReadFailure on any OS or decoding error.
    """
    try:
        return Path(path).read_bytes().decode(encoding, errors="surrogateescape")
    except (OSError, UnicodeError, LookupError) as exc:
        raise ReadFailure(path, exc) from exc


class ChangeFeed(ABC):
    """Abstract source of "watched file content changed" notifications."""

    def __init__(self, path: str, encoding: str = "utf-8") -> None:
        self._path = os.path.realpath(path)
        self._encoding = encoding

    @property
    def path(self) -> str:
        return self._path

    @abstractmethod
    async def start(self, sink: EventSink) -> None:
        """Begin delivering DATA_MODIFIED events to *sink*.

        Raises FeedSetupError when the feed cannot be established.
        """

    @abstractmethod
    async def stop(self) -> None:
        """Stop delivering events.  Safe to call more than once."""

    def read_current(self) -> str:
        """Read the watched file's current content (raises ReadFailure)."""
        return read_text(self._path, self._encoding)
