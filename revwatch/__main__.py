"""Entry point for `python -m revwatch`.

Usage:
    python -m revwatch --file notes.txt
    uv run python -m revwatch --file notes.txt --mode stream
"""

from __future__ import annotations

from revwatch.cli import cli

cli()
