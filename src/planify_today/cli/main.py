# src/planify_today/cli/main.py

"""
CLI entrypoint.

Initializes logging, runs the asyncio loop that hosts the extension:
- enable() on start (first sync cycle, timers armed),
- console commands read from stdin on the same loop (optional),
- disable() on /exit, EOF, SIGINT or SIGTERM.
"""

from __future__ import annotations

import asyncio
import logging
import signal
from typing import TextIO

from ..cli.bootstrap import create_session
from ..config import get_settings
from ..connectors.console_connector import run_console
from ..logging_setup import setup_logging

logger = logging.getLogger(__name__)


async def run(settings, *, stop: asyncio.Event | None = None, stream: TextIO | None = None) -> None:
    loop = asyncio.get_running_loop()
    if stop is None:
        stop = asyncio.Event()

    handled_signals: list[signal.Signals] = []
    for signum in (signal.SIGINT, signal.SIGTERM):
        try:
            loop.add_signal_handler(signum, stop.set)
            handled_signals.append(signum)
        except (NotImplementedError, RuntimeError):
            logger.debug("Signal handler for %s not supported on this loop", signum)

    session = create_session(settings=settings, loop=loop)
    extension = session.extension
    extension.init()

    stop_console = None
    try:
        extension.enable()
        if settings.console_enabled:
            stop_console = run_console(session, stop, stream=stream)
        else:
            logger.info("Console disabled. Running loops only. Press Ctrl+C to stop.")
        await stop.wait()
    finally:
        if stop_console is not None:
            stop_console()
        extension.disable()
        for signum in handled_signals:
            loop.remove_signal_handler(signum)


def main() -> None:
    settings = get_settings()

    level_name = str(getattr(settings, "log_level", "INFO")).upper()
    console_level = getattr(logging, level_name, logging.INFO)
    setup_logging(log_dir=settings.data_dir, console_level=console_level)

    logger.info("Starting %s...", settings.app_name)
    try:
        asyncio.run(run(settings))
    except KeyboardInterrupt:
        pass
    logger.info("Bye.")


if __name__ == "__main__":
    main()
