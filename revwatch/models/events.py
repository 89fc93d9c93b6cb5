"""Change-feed events and user commands."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from enum import StrEnum


class ChangeKind(StrEnum):
    """Kind of filesystem notification observed for the watched file."""

    DATA_MODIFIED = "data_modified"
    METADATA = "metadata"
    DELETED = "deleted"
    MOVED = "moved"


class Command(StrEnum):
    """Logical user commands, independent of the input device."""

    ADVANCE = "advance"
    RETREAT = "retreat"
    QUIT = "quit"


@dataclass(frozen=True)
class ChangeEvent:
    """Notification delivered by a ChangeFeed.

    Only ``DATA_MODIFIED`` events are forwarded to the session; the others
    exist so that adapters can log what they dropped.
    """

    kind: ChangeKind
    path: str
    observed_at: float = field(default_factory=time.monotonic)
