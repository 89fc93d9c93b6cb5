"""Core data structures for revwatch."""

from revwatch.models.config import RevwatchConfig
from revwatch.models.diff import DiffHunk, DiffLine, DiffScript, DiffTag
from revwatch.models.events import ChangeEvent, ChangeKind, Command
from revwatch.models.snapshot import RecordOutcome, RecordStatus, Snapshot

__all__ = [
    "ChangeEvent",
    "ChangeKind",
    "Command",
    "DiffHunk",
    "DiffLine",
    "DiffScript",
    "DiffTag",
    "RecordOutcome",
    "RecordStatus",
    "RevwatchConfig",
    "Snapshot",
]
