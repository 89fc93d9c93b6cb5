"""Keyboard input for revwatch."""

from revwatch.input.keyboard import KeyboardInput, KeyDecoder, decode_keys

__all__ = ["KeyDecoder", "KeyboardInput", "decode_keys"]
