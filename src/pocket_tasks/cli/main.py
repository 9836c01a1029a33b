# src/pocket_tasks/cli/main.py

"""
CLI entrypoint.

Initializes logging and builds AppState, then:
- runs the asyncio loop (snapshot writer) in a background thread,
- hydrates the task store on that loop,
- runs the blocking console REPL in the main thread, so Ctrl+C lands there,
- drains pending snapshots before exiting.
"""

from __future__ import annotations

import asyncio
import contextlib
import logging
import threading
from collections.abc import Callable, Coroutine
from dataclasses import dataclass
from typing import Any, TypeVar

from ..cli.bootstrap import create_initial_state, start_state, stop_state
from ..config import get_settings
from ..connectors.console_connector import run_console_loop
from ..core.state import AppState
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class BackgroundLoop:
    thread: threading.Thread
    loop: asyncio.AbstractEventLoop

    def run(self, coro: Coroutine[Any, Any, T], timeout: float | None = None) -> T:
        """Run `coro` on the background loop and wait for its result."""
        return asyncio.run_coroutine_threadsafe(coro, self.loop).result(timeout)

    def stop(self, timeout: float | None = 10.0) -> None:
        with contextlib.suppress(RuntimeError):
            self.loop.call_soon_threadsafe(self.loop.stop)
        self.thread.join(timeout=timeout)


def start_background_loop() -> BackgroundLoop:
    """
    Start an event loop in a daemon thread.

    Why a thread:
    - console REPL is blocking (input()) and must own the main thread for SIGINT.
    - the snapshot writer is async and wants its own event loop.
    """
    ready = threading.Event()
    loop = asyncio.new_event_loop()

    def runner() -> None:
        asyncio.set_event_loop(loop)
        loop.call_soon(ready.set)
        try:
            loop.run_forever()
        finally:
            with contextlib.suppress(Exception):
                loop.close()

    t = threading.Thread(target=runner, name="pocket-loop", daemon=True)
    t.start()
    ready.wait(timeout=5.0)
    logger.debug("Background event loop started.")
    return BackgroundLoop(thread=t, loop=loop)


def run_app(state: AppState, read: Callable[[str], str] = input) -> None:
    """Hydrate, run the REPL until it ends (/exit, EOF, Ctrl+C), then drain storage."""
    bg = start_background_loop()
    try:
        bg.run(start_state(state))
        if state.settings.console_enabled:
            run_console_loop(state, read=read)
        else:
            logger.info("Console disabled; nothing to do after hydration.")
    finally:
        bg.run(stop_state(state))
        bg.stop()


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)

    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)

    # IMPORTANT: reuse same settings object
    state = create_initial_state(settings=settings)

    try:
        run_app(state)
    except KeyboardInterrupt:
        logger.info("Interrupted.")
    logger.info("Bye.")


if __name__ == "__main__":
    main()
