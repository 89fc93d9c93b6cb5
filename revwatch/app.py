"""Application bootstrap for revwatch.

Wires all components in dependency order and manages the asyncio lifecycle.
Startup order: config → logging → history (seed read) → session → change feed
              → presenter → keyboard

The seed read and the change feed are mandatory: if either fails the app
exits before the control loop starts.  Shutdown stops components in reverse
startup order; each stop is wrapped independently so one failure does not
leave the terminal in raw mode or the observer thread running.
"""

from __future__ import annotations

import asyncio
import signal
from typing import TYPE_CHECKING

from revwatch.config import load_config
from revwatch.errors import ReadFailure
from revwatch.feed import WatchdogChangeFeed, read_text
from revwatch.history import VersionStore
from revwatch.input import KeyboardInput
from revwatch.models.config import RevwatchConfig
from revwatch.observability.logging import close_logging, get_logger, setup_logging
from revwatch.presentation import Presenter, build_presenter
from revwatch.session import WatchSession

if TYPE_CHECKING:
    import structlog
    from rich.console import Console

_SHUTDOWN_GRACE_SECONDS = 5


class _ComponentError(Exception):
    """Raised when a mandatory component fails to start."""

    def __init__(self, component: str, cause: Exception) -> None:
        super().__init__(f"Component '{component}' failed to start: {cause}")
        self.component = component
        self.cause = cause


class RevwatchApp:
    """Application root.  Owns every component and coordinates their lifecycle.

    ``stop()`` is idempotent: calling it on an app that was never started
    (or already stopped) is safe.
    """

    def __init__(self, config: RevwatchConfig | None = None, console: Console | None = None) -> None:
        self.config = config
        self._console = console

        self._store: VersionStore | None = None
        self._session: WatchSession | None = None
        self._feed: WatchdogChangeFeed | None = None
        self._presenter: Presenter | None = None
        self._keyboard: KeyboardInput | None = None

        self._running = False
        self._stopped = False
        self._log: structlog.stdlib.BoundLogger | None = None

    @property
    def session(self) -> WatchSession | None:
        return self._session

    # ------------------------------------------------------------------
    # Startup
    # ------------------------------------------------------------------

    async def start(self) -> None:
        """Start all components in dependency order.

        Raises _ComponentError if a mandatory component cannot start.
        """
        # --- 1. Configuration -------------------------------------------
        if self.config is None:
            self.config = load_config()

        # --- 2. Logging -------------------------------------------------
        setup_logging(self.config.log.level, self.config.log.file)
        self._log = get_logger("app")
        self._log.info("revwatch starting", version=_revwatch_version(), path=self.config.watch.path)

        # --- 3. History, seeded with the file's current content ---------
        self._start_history()

        # --- 4. Session --------------------------------------------------
        self._start_session()

        # --- 5. Change feed ----------------------------------------------
        await self._start_feed()

        # --- 6. Presenter -------------------------------------------------
        await self._start_presenter()

        # --- 7. Keyboard (optional) ---------------------------------------
        await self._start_keyboard()

        self._running = True
        self._log.info("revwatch started", mode=self.config.display.mode.value)

    def _start_history(self) -> None:
        assert self._log is not None
        assert self.config is not None
        try:
            content = read_text(self.config.watch.path, self.config.watch.encoding)
        except ReadFailure as exc:
            raise _ComponentError("history", exc) from exc
        store = VersionStore()
        store.record(content)
        self._store = store
        self._log.info("history seeded", lines=store.current().line_count)

    def _start_session(self) -> None:
        assert self.config is not None
        assert self._store is not None
        # The presenter is created here but started later, after the feed,
        # so a feed failure never leaves the terminal on the alternate screen.
        try:
            self._presenter = build_presenter(
                self.config.display,
                encoding=self.config.watch.encoding,
                console=self._console,
            )
        except ValueError as exc:
            raise _ComponentError("presenter", exc) from exc
        self._session = WatchSession(
            store=self._store,
            feed=self._build_feed(),
            presenter=self._presenter,
            refresh_interval=self.config.session.refresh_interval,
            max_read_failures=self.config.session.max_read_failures,
        )

    def _build_feed(self) -> WatchdogChangeFeed:
        assert self.config is not None
        self._feed = WatchdogChangeFeed(
            self.config.watch.path,
            encoding=self.config.watch.encoding,
            debounce_ms=self.config.watch.debounce_ms,
            polling=self.config.watch.polling,
        )
        return self._feed

    async def _start_feed(self) -> None:
        assert self._log is not None
        assert self._feed is not None
        assert self._session is not None
        self._log.debug("starting change feed")
        try:
            await self._feed.start(self._session.post_change)
        except Exception as exc:
            raise _ComponentError("feed", exc) from exc
        self._log.info("change feed started", path=self._feed.path)

    async def _start_presenter(self) -> None:
        assert self._log is not None
        assert self._presenter is not None
        self._log.debug("starting presenter")
        try:
            await self._presenter.start()
        except Exception as exc:
            raise _ComponentError("presenter", exc) from exc
        self._log.info("presenter started", presenter=self._presenter.presenter_name)

    async def _start_keyboard(self) -> None:
        """Attach keyboard navigation.  Non-fatal: without it only signals quit."""
        assert self._log is not None
        assert self._session is not None
        keyboard = KeyboardInput(self._session.post_command)
        try:
            attached = await keyboard.start()
        except Exception as exc:
            self._log.warning("keyboard failed to start; navigation disabled", error=str(exc))
            return
        if attached:
            self._keyboard = keyboard

    # ------------------------------------------------------------------
    # Running
    # ------------------------------------------------------------------

    async def run(self) -> None:
        """Run the session until the user quits."""
        assert self._session is not None
        await self._session.run()

    def request_quit(self) -> None:
        if self._session is not None:
            self._session.request_quit()

    # ------------------------------------------------------------------
    # Shutdown
    # ------------------------------------------------------------------

    async def stop(self) -> None:
        """Stop all components in reverse startup order."""
        if self._stopped or (not self._running and self._log is None):
            return

        log = self._log or get_logger("app")
        self._running = False
        self._stopped = True

        await self._stop_component("keyboard", self._keyboard)
        self._keyboard = None
        await self._stop_component("presenter", self._presenter)
        await self._stop_component("feed", self._feed)

        log.info("revwatch stopped", versions=len(self._store) if self._store is not None else 0)
        close_logging()

    async def _stop_component(self, name: str, component: object | None) -> None:
        """Call stop() on a component if it has that method, catching all errors."""
        if component is None:
            return
        log = self._log or get_logger("app")
        stop_fn = getattr(component, "stop", None)
        if stop_fn is None:
            return
        try:
            result = stop_fn()
            if asyncio.iscoroutine(result):
                await asyncio.wait_for(result, timeout=_SHUTDOWN_GRACE_SECONDS)
        except TimeoutError:
            log.warning("component stop timed out", component=name, timeout=_SHUTDOWN_GRACE_SECONDS)
        except Exception as exc:
            log.error("component stop raised an error", component=name, error=str(exc))


def _revwatch_version() -> str:
    from revwatch import __version__

    return __version__


# ---------------------------------------------------------------------------
# Async entrypoint
# ---------------------------------------------------------------------------


async def main(config: RevwatchConfig | None = None) -> None:
    """Create the app, register OS signals, run until the user quits."""
    app = RevwatchApp(config)
    loop = asyncio.get_running_loop()

    for sig in (signal.SIGTERM, signal.SIGINT):
        loop.add_signal_handler(sig, app.request_quit)

    try:
        await app.start()
        await app.run()
    except _ComponentError as exc:
        get_logger("app").critical(
            "fatal startup error",
            component=exc.component,
            error=str(exc.cause),
        )
        await app.stop()
        raise SystemExit(1) from exc
    except ReadFailure as exc:
        get_logger("app").critical("watched file unreadable", path=exc.path, error=str(exc.cause))
        await app.stop()
        raise SystemExit(1) from exc
    finally:
        await app.stop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.remove_signal_handler(sig)
