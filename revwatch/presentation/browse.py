"""Side-by-side version browser drawn with rich.

Layout (top to bottom): a tab bar of version indices with the cursor
highlighted, two panes showing the current version and the next one, and a
footer with key help and the last status message.  When the frame carries a
diff, lines deleted on the way to "next" are red in the left pane and lines
inserted are green in the right pane.
"""

from __future__ import annotations

import time

from rich.console import Console, Group, RenderableType
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from revwatch.models.diff import DiffScript, DiffTag
from revwatch.models.snapshot import Snapshot
from revwatch.observability.logging import get_logger
from revwatch.presentation.base import Presenter, RecordedChange, RenderFrame, display_text

_logger = get_logger("presentation.browse")

_MAX_TABS = 24
_STYLE_DELETE = "red"
_STYLE_INSERT = "green"
_STYLE_TAB = "cyan"
_STYLE_TAB_SELECTED = "bold white on black"
_KEY_HELP = "←/h previous   →/l next   q quit"


def _tab_window(index: int, total: int) -> range:
    if total <= _MAX_TABS:
        return range(total)
    start = min(max(index - _MAX_TABS // 2, 0), total - _MAX_TABS)
    return range(start, start + _MAX_TABS)


def _tab_bar(index: int, total: int) -> Text:
    bar = Text()
    window = _tab_window(index, total)
    if window.start > 0:
        bar.append("… ", style="dim")
    for i in window:
        if i > window.start:
            bar.append("│", style="dim")
        bar.append(f" {i} ", style=_STYLE_TAB_SELECTED if i == index else _STYLE_TAB)
    if window.stop < total:
        bar.append(" …", style="dim")
    return bar


def _age(snapshot: Snapshot, now: float) -> str:
    seconds = max(int(now - snapshot.captured_at), 0)
    clock = snapshot.recorded_at.astimezone().strftime("%H:%M:%S")
    return f"{clock}, {seconds}s ago"


def _side(script: DiffScript, skip: DiffTag, highlight: DiffTag, style: str) -> Text:
    """One pane of a diff: every line except *skip*, *highlight* lines styled."""
    text = Text()
    for line in script:
        if line.tag is skip:
            continue
        content = display_text(line.text) + ("\n" if line.newline else "")
        text.append(content, style=style if line.tag is highlight else None)
    return text


def build_view(frame: RenderFrame, status: str = "", now: float | None = None) -> RenderableType:
    """Build the renderable for *frame*.  Pure: does no I/O."""
    now = time.monotonic() if now is None else now

    header = Panel(
        _tab_bar(frame.index, frame.total),
        title=f"version {frame.index} of {frame.total - 1}",
        title_align="left",
    )

    if frame.next is None:
        left = Text(display_text(frame.current.content))
        next_pane = Panel(Text("Nothing", style="dim"), title="next", title_align="left")
    else:
        if frame.script is not None:
            left = _side(frame.script, DiffTag.INSERT, DiffTag.DELETE, _STYLE_DELETE)
            right = _side(frame.script, DiffTag.DELETE, DiffTag.INSERT, _STYLE_INSERT)
        else:
            left = Text(display_text(frame.current.content))
            right = Text(display_text(frame.next.content))
        next_pane = Panel(right, title=f"#{frame.index + 1} next ({_age(frame.next, now)})", title_align="left")

    current_pane = Panel(left, title=f"#{frame.index} current ({_age(frame.current, now)})", title_align="left")

    body = Table.grid(expand=True)
    body.add_column(ratio=1)
    body.add_column(ratio=1)
    body.add_row(current_pane, next_pane)

    footer = Text(_KEY_HELP, style="dim")
    if status:
        footer.append("   ")
        footer.append(status, style="bold yellow")

    return Group(header, body, footer)


class BrowsePresenter(Presenter):
    """Interactive browser: current vs next, redrawn on every frame.

    Args:
        console: rich Console to draw on (a fresh one by default).
        screen:  Use the terminal's alternate screen while running.
    """

    wants_frame_diff = True

    def __init__(self, console: Console | None = None, screen: bool = True) -> None:
        self._console = console or Console()
        self._screen = screen
        self._live: Live | None = None
        self._last_frame: RenderFrame | None = None
        self._status = ""

    @property
    def presenter_name(self) -> str:
        return "browse"

    @property
    def status(self) -> str:
        return self._status

    async def start(self) -> None:
        if self._live is not None:
            return
        self._live = Live(
            console=self._console,
            screen=self._screen,
            auto_refresh=False,
            vertical_overflow="crop",
        )
        self._live.start()
        _logger.debug("presenter_started", presenter=self.presenter_name, screen=self._screen)

    async def stop(self) -> None:
        live, self._live = self._live, None
        if live is not None:
            live.stop()

    async def render(self, frame: RenderFrame) -> None:
        self._last_frame = frame
        self._draw()

    async def show_change(self, change: RecordedChange) -> None:
        # A new version clears any stale read error.
        self._status = ""

    async def report_error(self, message: str) -> None:
        self._status = message
        self._draw()

    def _draw(self) -> None:
        if self._last_frame is None:
            return
        view = build_view(self._last_frame, status=self._status)
        if self._live is not None:
            self._live.update(view, refresh=True)
        else:
            self._console.print(view)
