"""Streaming presenter: prints the diff of every newly recorded version."""

from __future__ import annotations

from rich.console import Console
from rich.text import Text

from revwatch.diff import hunks
from revwatch.models.diff import DiffTag
from revwatch.presentation.base import Presenter, RecordedChange, display_text

_SIGN_STYLE = {
    DiffTag.INSERT: "green",
    DiffTag.DELETE: "red",
    DiffTag.EQUAL: "",
}


def format_change(change: RecordedChange, context: int = 3) -> Text:
    """Render *change* as a coloured unified diff."""
    script = change.script
    out = Text()
    out.append(f"version {change.index}", style="bold")
    out.append(f"  +{script.insertions} -{script.deletions}\n", style="dim")
    for hunk in hunks(script, context):
        out.append(hunk.header + "\n", style="cyan")
        for line in hunk.lines:
            style = _SIGN_STYLE[line.tag]
            out.append(line.sign, style=f"bold {style}".strip())
            out.append(display_text(line.text) + "\n", style=style or None)
            if not line.newline:
                out.append("\\ No newline at end of file\n", style="dim")
    return out


class StreamPresenter(Presenter):
    """Append-only output: one diff block per recorded version.

    Args:
        console: rich Console to print on.
        clear:   Clear the screen before each block instead of printing a rule.
        context: Equal lines shown around each change.
    """

    def __init__(self, console: Console | None = None, clear: bool = False, context: int = 3) -> None:
        self._console = console or Console()
        self._clear = clear
        self._context = context

    @property
    def presenter_name(self) -> str:
        return "stream"

    async def show_change(self, change: RecordedChange) -> None:
        if self._clear:
            self._console.clear()
        else:
            self._console.rule()
        self._console.print(format_change(change, self._context), end="")

    async def report_error(self, message: str) -> None:
        self._console.print(Text(f"error: {message}", style="bold red"))
