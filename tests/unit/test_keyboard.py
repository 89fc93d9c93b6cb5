"""Tests for raw key decoding and the keyboard input adapter."""

from __future__ import annotations

import asyncio
import os

from revwatch.input.keyboard import KeyboardInput, KeyDecoder, decode_keys
from revwatch.models.events import Command


class TestDecodeKeys:
    def test_arrow_keys(self) -> None:
        assert decode_keys(b"\x1b[C") == [Command.ADVANCE]
        assert decode_keys(b"\x1b[D") == [Command.RETREAT]

    def test_application_mode_arrows(self) -> None:
        assert decode_keys(b"\x1bOC\x1bOD") == [Command.ADVANCE, Command.RETREAT]

    def test_letter_keys(self) -> None:
        assert decode_keys(b"lnhp ") == [
            Command.ADVANCE,
            Command.ADVANCE,
            Command.RETREAT,
            Command.RETREAT,
            Command.ADVANCE,
        ]

    def test_quit_keys(self) -> None:
        assert decode_keys(b"q") == [Command.QUIT]
        assert decode_keys(b"\x03") == [Command.QUIT]

    def test_lone_escape_quits(self) -> None:
        assert decode_keys(b"\x1b") == [Command.QUIT]

    def test_other_escape_sequences_are_skipped_whole(self) -> None:
        """Up arrow and F5 must not leak their trailing bytes as letters."""
        assert decode_keys(b"\x1b[A\x1b[15~l") == [Command.ADVANCE]

    def test_unknown_bytes_ignored(self) -> None:
        assert decode_keys(b"xyz\x00") == []

    def test_burst_keeps_order(self) -> None:
        assert decode_keys(b"\x1b[Cl\x1b[Dq") == [
            Command.ADVANCE,
            Command.ADVANCE,
            Command.RETREAT,
            Command.QUIT,
        ]


class TestKeyDecoder:
    def test_arrow_split_across_reads(self) -> None:
        decoder = KeyDecoder()
        assert decoder.feed(b"\x1b") == []
        assert decoder.pending
        assert decoder.feed(b"[C") == [Command.ADVANCE]
        assert not decoder.pending

    def test_split_after_bracket(self) -> None:
        decoder = KeyDecoder()
        assert decoder.feed(b"l\x1b[") == [Command.ADVANCE]
        assert decoder.feed(b"D") == [Command.RETREAT]

    def test_flush_turns_lone_escape_into_quit(self) -> None:
        decoder = KeyDecoder()
        assert decoder.feed(b"\x1b") == []
        assert decoder.flush() == [Command.QUIT]
        assert decoder.flush() == []

    def test_escape_followed_by_key_is_not_held(self) -> None:
        decoder = KeyDecoder()
        assert decoder.feed(b"\x1bq") == [Command.QUIT, Command.QUIT]
        assert not decoder.pending


class TestKeyboardInput:
    async def test_not_a_tty_is_not_attached(self) -> None:
        read_fd, write_fd = os.pipe()
        try:
            keyboard = KeyboardInput(lambda cmd: None, fd=read_fd)
            assert await keyboard.start() is False
            await keyboard.stop()
        finally:
            os.close(read_fd)
            os.close(write_fd)

    def test_readable_fd_forwards_commands(self) -> None:
        received: list[Command] = []
        read_fd, write_fd = os.pipe()
        try:
            keyboard = KeyboardInput(received.append, fd=read_fd)
            os.write(write_fd, b"\x1b[Cq")
            keyboard._on_readable()
        finally:
            os.close(read_fd)
            os.close(write_fd)
        assert received == [Command.ADVANCE, Command.QUIT]

    def test_escape_sequence_split_across_reads(self) -> None:
        received: list[Command] = []
        read_fd, write_fd = os.pipe()
        try:
            keyboard = KeyboardInput(received.append, fd=read_fd)
            os.write(write_fd, b"\x1b")
            keyboard._on_readable()
            assert received == []
            os.write(write_fd, b"[D")
            keyboard._on_readable()
        finally:
            os.close(read_fd)
            os.close(write_fd)
        assert received == [Command.RETREAT]

    async def test_lone_escape_quits_after_timeout(self) -> None:
        received: list[Command] = []
        read_fd, write_fd = os.pipe()
        try:
            keyboard = KeyboardInput(received.append, fd=read_fd)
            keyboard._loop = asyncio.get_running_loop()
            os.write(write_fd, b"\x1b")
            keyboard._on_readable()
            assert received == []
            await asyncio.sleep(0.2)
        finally:
            os.close(read_fd)
            os.close(write_fd)
        assert received == [Command.QUIT]
