"""Presenter that hands each recorded change to an external diff program.

For every new version the previous and latest contents are written to two
temporary files and ``<command> OLD NEW`` is run (``delta`` by default).
Its stdout is printed; the outcome is logged and never touches the history.
"""

from __future__ import annotations

import asyncio
import shlex
import tempfile
from pathlib import Path

from rich.console import Console
from rich.text import Text

from revwatch.observability.logging import get_logger
from revwatch.presentation.base import Presenter, RecordedChange

_logger = get_logger("presentation.external")

# diff-style tools exit 1 when the inputs differ.
_OK_EXIT_CODES = (0, 1)


class ExternalDiffPresenter(Presenter):
    """Runs an external pairwise-diff display for each recorded change.

    Args:
        command:  Program and leading arguments, shell-quoted (e.g. ``"delta --side-by-side"``).
        console:  rich Console that receives the program's output.
        clear:    Clear the screen before each run instead of printing a rule.
        encoding: Encoding used to write the temporary files.
    """

    def __init__(
        self,
        command: str = "delta",
        console: Console | None = None,
        clear: bool = False,
        encoding: str = "utf-8",
    ) -> None:
        argv = shlex.split(command)
        if not argv:
            raise ValueError("External diff command must not be empty")
        self._argv = argv
        self._console = console or Console()
        self._clear = clear
        self._encoding = encoding

    @property
    def presenter_name(self) -> str:
        return "external"

    async def show_change(self, change: RecordedChange) -> None:
        with tempfile.TemporaryDirectory(prefix="revwatch-") as tmp:
            old_path = Path(tmp) / f"v{change.index - 1}"
            new_path = Path(tmp) / f"v{change.index}"
            old_path.write_bytes(change.previous.content.encode(self._encoding, "surrogateescape"))
            new_path.write_bytes(change.latest.content.encode(self._encoding, "surrogateescape"))
            ok = await self._run(str(old_path), str(new_path), change.index)
        if not ok:
            await self.report_error(f"external diff '{self._argv[0]}' failed for version {change.index}")

    async def report_error(self, message: str) -> None:
        self._console.print(Text(f"error: {message}", style="bold red"))

    async def _run(self, old_path: str, new_path: str, index: int) -> bool:
        try:
            proc = await asyncio.create_subprocess_exec(
                *self._argv,
                old_path,
                new_path,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await proc.communicate()
        except OSError as exc:
            _logger.warning("external_diff_unavailable", command=self._argv[0], error=str(exc))
            return False

        if self._clear:
            self._console.clear()
        else:
            self._console.rule()
        self._console.print(Text.from_ansi(stdout.decode("utf-8", "replace")), end="")

        if proc.returncode not in _OK_EXIT_CODES:
            _logger.warning(
                "external_diff_failed",
                command=self._argv[0],
                returncode=proc.returncode,
                stderr=stderr.decode("utf-8", "replace")[:200],
                index=index,
            )
            return False
        _logger.info("external_diff_ok", command=self._argv[0], returncode=proc.returncode, index=index)
        return True
