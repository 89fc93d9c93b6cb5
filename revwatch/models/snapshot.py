"""Snapshot and record-outcome data structures."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum


@dataclass(frozen=True)
class Snapshot:
    """Captured file content at one point in time.

    Immutable: owned by the VersionStore that appended it.  Only ``content``
    takes part in equality; the timestamps are for ordering and display.
    """

    content: str
    captured_at: float = field(default_factory=time.monotonic, compare=False)
    recorded_at: datetime = field(default_factory=lambda: datetime.now(tz=UTC), compare=False)

    @property
    def line_count(self) -> int:
        """Number of lines, counting a final unterminated line."""
        if not self.content:
            return 0
        return self.content.count("\n") + (0 if self.content.endswith("\n") else 1)


class RecordStatus(StrEnum):
    """Result of offering new content to the VersionStore."""

    APPENDED = "appended"
    UNCHANGED = "unchanged"


@dataclass(frozen=True)
class RecordOutcome:
    """Returned by VersionStore.record()."""

    status: RecordStatus
    index: int | None = None

    @classmethod
    def appended_at(cls, index: int) -> RecordOutcome:
        return cls(status=RecordStatus.APPENDED, index=index)

    @classmethod
    def unchanged(cls) -> RecordOutcome:
        return cls(status=RecordStatus.UNCHANGED)

    @property
    def appended(self) -> bool:
        return self.status is RecordStatus.APPENDED
