"""Exception taxonomy for revwatch."""

from __future__ import annotations


class RevwatchError(Exception):
    """Base class for every error raised by revwatch."""


class ReadFailure(RevwatchError):
    """The watched file could not be read (seeding or re-reading)."""

    def __init__(self, path: str, cause: Exception) -> None:
        super().__init__(f"Cannot read '{path}': {cause}")
        self.path = path
        self.cause = cause


class FeedSetupError(RevwatchError):
    """The change feed could not be established for the watched file."""

    def __init__(self, path: str, cause: Exception) -> None:
        super().__init__(f"Cannot watch '{path}': {cause}")
        self.path = path
        self.cause = cause


class EmptyHistoryError(RevwatchError):
    """A snapshot was requested from a store that has none."""


class DiffApplyError(RevwatchError):
    """A diff script does not match the text it is applied to."""
