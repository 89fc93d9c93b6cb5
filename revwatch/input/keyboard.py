"""Keyboard input: raw key bytes to logical commands.

stdin is switched to cbreak mode (no line buffering, no echo, signals still
delivered) and watched with ``loop.add_reader`` so key presses wake the
session's queue like any other event; there is no polling.

An arrow key is a multi-byte escape sequence and may be split across two
reads.  A trailing escape is therefore held back until the next read, or
until ``_ESC_TIMEOUT`` passes, before a lone Esc is taken as quit.
"""

from __future__ import annotations

import asyncio
import os
import sys
import termios
import tty
from collections.abc import Callable

from revwatch.models.events import Command
from revwatch.observability.logging import get_logger

_logger = get_logger("input.keyboard")

_ESC = 0x1B
_READ_SIZE = 64
_ESC_TIMEOUT = 0.05  # seconds
_MAX_SEQUENCE = 16

_SEQUENCES: dict[bytes, Command] = {
    b"\x1b[C": Command.ADVANCE,  # right arrow
    b"\x1bOC": Command.ADVANCE,
    b"\x1b[D": Command.RETREAT,  # left arrow
    b"\x1bOD": Command.RETREAT,
}

_KEYS: dict[int, Command] = {
    ord("l"): Command.ADVANCE,
    ord("n"): Command.ADVANCE,
    ord(" "): Command.ADVANCE,
    ord("h"): Command.RETREAT,
    ord("p"): Command.RETREAT,
    ord("q"): Command.QUIT,
    0x03: Command.QUIT,  # Ctrl-C when ISIG is off
}


def _is_final(byte: int) -> bool:
    return 0x40 <= byte <= 0x7E


def decode_keys(data: bytes) -> list[Command]:
    """Decode a complete chunk of raw terminal input into commands.

    Arrow keys arrive as CSI/SS3 escape sequences; any other sequence is
    skipped whole.  A lone Esc means quit.  Unknown bytes are ignored.
    """
    commands: list[Command] = []
    i = 0
    while i < len(data):
        byte = data[i]
        if byte == _ESC:
            if data[i + 1 : i + 2] in (b"[", b"O"):
                j = i + 2
                while j < len(data) and not _is_final(data[j]):
                    j += 1
                cmd = _SEQUENCES.get(data[i : j + 1])
                if cmd is not None:
                    commands.append(cmd)
                i = j + 1
                continue
            commands.append(Command.QUIT)
            i += 1
            continue
        cmd = _KEYS.get(byte)
        if cmd is not None:
            commands.append(cmd)
        i += 1
    return commands


def _incomplete_tail(data: bytes) -> int:
    """Index where an unfinished escape sequence starts, else ``len(data)``."""
    start = data.rfind(b"\x1b")
    if start < 0:
        return len(data)
    rest = data[start + 1 :]
    if not rest:
        return start
    if rest[:1] in (b"[", b"O") and len(rest) < _MAX_SEQUENCE and not any(_is_final(b) for b in rest[1:]):
        return start
    return len(data)


class KeyDecoder:
    """Decodes a stream of reads, holding back a split escape sequence."""

    def __init__(self) -> None:
        self._pending = b""

    @property
    def pending(self) -> bool:
        return bool(self._pending)

    def feed(self, data: bytes) -> list[Command]:
        data = self._pending + data
        cut = _incomplete_tail(data)
        self._pending = data[cut:]
        return decode_keys(data[:cut])

    def flush(self) -> list[Command]:
        """Decode whatever is held back as if no more bytes will follow."""
        data, self._pending = self._pending, b""
        return decode_keys(data)


class KeyboardInput:
    """Forwards decoded key presses from a terminal to *sink*.

    When the input is not a TTY nothing is registered and ``start`` returns
    False; the session can then only be stopped by a signal.
    """

    def __init__(self, sink: Callable[[Command], None], fd: int | None = None) -> None:
        self._sink = sink
        self._fd = fd
        self._saved: list | None = None
        self._loop: asyncio.AbstractEventLoop | None = None
        self._decoder = KeyDecoder()
        self._flush_handle: asyncio.TimerHandle | None = None

    async def start(self) -> bool:
        if self._fd is None:
            try:
                self._fd = sys.stdin.fileno()
            except (OSError, ValueError):
                _logger.info("keyboard_unavailable", reason="stdin has no file descriptor")
                return False
        if not os.isatty(self._fd):
            _logger.info("keyboard_unavailable", reason="stdin is not a tty")
            return False
        self._saved = termios.tcgetattr(self._fd)
        tty.setcbreak(self._fd)
        self._loop = asyncio.get_running_loop()
        self._loop.add_reader(self._fd, self._on_readable)
        _logger.debug("keyboard_started", fd=self._fd)
        return True

    async def stop(self) -> None:
        self._cancel_flush()
        if self._loop is not None:
            self._loop.remove_reader(self._fd)
            self._loop = None
        if self._saved is not None:
            termios.tcsetattr(self._fd, termios.TCSADRAIN, self._saved)
            self._saved = None

    def _on_readable(self) -> None:
        self._cancel_flush()
        try:
            data = os.read(self._fd, _READ_SIZE)
        except OSError as exc:
            _logger.warning("keyboard_read_error", error=str(exc))
            return
        if not data:
            _logger.info("keyboard_eof")
            if self._loop is not None:
                self._loop.remove_reader(self._fd)
            self._flush()
            return
        self._forward(self._decoder.feed(data))
        if self._decoder.pending and self._loop is not None:
            self._flush_handle = self._loop.call_later(_ESC_TIMEOUT, self._flush)

    def _flush(self) -> None:
        self._flush_handle = None
        self._forward(self._decoder.flush())

    def _cancel_flush(self) -> None:
        if self._flush_handle is not None:
            self._flush_handle.cancel()
            self._flush_handle = None

    def _forward(self, commands: list[Command]) -> None:
        for command in commands:
            self._sink(command)
