"""Diff engine for revwatch.

Pure functions turning two text blobs into a tagged line-level edit script.

Exports:
    compute      -- Myers shortest edit script between two texts.
    apply_script -- Replay a script against its old text.
    hunks        -- Group a script into unified-diff hunks.
    split_lines  -- The line splitting used by all of the above.
"""

from revwatch.diff.engine import apply_script, compute, hunks, split_lines

__all__ = ["apply_script", "compute", "hunks", "split_lines"]
