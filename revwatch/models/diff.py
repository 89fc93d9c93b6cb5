"""Line-level diff data structures."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import StrEnum


class DiffTag(StrEnum):
    """Operation applied to a single line."""

    EQUAL = "equal"
    INSERT = "insert"
    DELETE = "delete"


@dataclass(frozen=True)
class DiffLine:
    """One tagged line of a diff script.

    ``text`` never contains the ``\\n`` delimiter.  ``newline`` is False only
    for a final line that had no trailing newline in its source text.
    """

    tag: DiffTag
    text: str
    newline: bool = True
    old_lineno: int | None = None  # 1-based, None for inserts
    new_lineno: int | None = None  # 1-based, None for deletes

    @property
    def sign(self) -> str:
        if self.tag is DiffTag.INSERT:
            return "+"
        if self.tag is DiffTag.DELETE:
            return "-"
        return " "


@dataclass(frozen=True)
class DiffScript:
    """Ordered edit script transforming one text into another.

    Derived value: recomputed on demand from two Snapshots and never stored
    in the history.
    """

    lines: tuple[DiffLine, ...] = ()

    def __iter__(self) -> Iterator[DiffLine]:
        return iter(self.lines)

    def __len__(self) -> int:
        return len(self.lines)

    @property
    def insertions(self) -> int:
        return sum(1 for line in self.lines if line.tag is DiffTag.INSERT)

    @property
    def deletions(self) -> int:
        return sum(1 for line in self.lines if line.tag is DiffTag.DELETE)

    @property
    def is_identity(self) -> bool:
        """True when every line is EQUAL (including the empty script)."""
        return all(line.tag is DiffTag.EQUAL for line in self.lines)


@dataclass(frozen=True)
class DiffHunk:
    """A unified-diff hunk: a run of changes plus surrounding context."""

    old_start: int
    old_count: int
    new_start: int
    new_count: int
    lines: tuple[DiffLine, ...]

    @property
    def header(self) -> str:
        return f"@@ -{self.old_start},{self.old_count} +{self.new_start},{self.new_count} @@"
