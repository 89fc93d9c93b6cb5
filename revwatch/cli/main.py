"""Click command for revwatch.

Options override the REVWATCH_* environment configuration; anything not
given on the command line keeps its environment (or default) value.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace

import click

from revwatch import __version__
from revwatch.config import load_config, validate_mode
from revwatch.models.config import DisplayMode, RevwatchConfig


def build_config(
    file: str,
    clear: bool,
    mode: str | None,
    diff_command: str | None,
    polling: bool,
    debounce_ms: int | None,
    log_level: str | None,
    log_file: str | None,
) -> RevwatchConfig:
    """Merge command-line options into the environment configuration."""
    try:
        base = load_config()
    except ValueError as exc:
        raise click.UsageError(f"invalid REVWATCH_* environment: {exc}") from exc

    watch = replace(base.watch, path=file)
    if polling:
        watch = replace(watch, polling=True)
    if debounce_ms is not None:
        watch = replace(watch, debounce_ms=debounce_ms)

    display = base.display
    if mode is not None:
        display = replace(display, mode=validate_mode(mode))
    if clear:
        display = replace(display, clear=True)
    if diff_command is not None:
        display = replace(display, diff_command=diff_command)
        if mode is None:
            # Naming a diff program implies external mode.
            display = replace(display, mode=DisplayMode.EXTERNAL)

    log = base.log
    if log_level is not None:
        log = replace(log, level=log_level.lower())
    if log_file is not None:
        log = replace(log, file=log_file)

    return RevwatchConfig(watch=watch, display=display, session=base.session, log=log)


@click.command(context_settings={"help_option_names": ["-h", "--help"]})
@click.option(
    "-f",
    "--file",
    "file",
    required=True,
    type=click.Path(exists=True, dir_okay=False, readable=True),
    help="Text file to watch.",
)
@click.option("-c", "--clear", is_flag=True, help="Clear the screen between diffs (stream/external modes).")
@click.option(
    "-m",
    "--mode",
    type=click.Choice([m.value for m in DisplayMode], case_sensitive=False),
    default=None,
    help="browse: side-by-side history (default); stream: print each diff; external: run --diff-command.",
)
@click.option("--diff-command", default=None, help="External diff program for external mode (default: delta).")
@click.option("--polling", is_flag=True, help="Poll the file instead of using native notifications.")
@click.option("--debounce-ms", type=click.IntRange(0, 5000), default=None, help="Collapse bursts of writes.")
@click.option(
    "--log-level",
    type=click.Choice(["debug", "info", "warning", "error"], case_sensitive=False),
    default=None,
)
@click.option("--log-file", type=click.Path(dir_okay=False, writable=True), default=None, help="Write JSON logs here.")
@click.version_option(__version__, prog_name="revwatch")
def cli(
    file: str,
    clear: bool,
    mode: str | None,
    diff_command: str | None,
    polling: bool,
    debounce_ms: int | None,
    log_level: str | None,
    log_file: str | None,
) -> None:
    """Watch FILE and browse the history of its contents."""
    from revwatch.app import main

    config = build_config(file, clear, mode, diff_command, polling, debounce_ms, log_level, log_file)
    asyncio.run(main(config))
