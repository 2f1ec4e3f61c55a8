# src/planify_today/cli/bootstrap.py

"""
CLI bootstrap helpers.

This module is the "composition root":
- loads settings once,
- wires the console host, timers, notifier and sqlite3 gateway into an
  ExtensionContext factory,
- returns the Extension plus the console session the commands operate on.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass

from ..config import get_settings
from ..connectors.console_connector import ConsoleMenu, ConsoleNotifier, ConsoleOverlays
from ..connectors.desktop_notifier import FanoutNotifier, NotifySendNotifier
from ..connectors.launcher import SubprocessLauncher
from ..connectors.timers import AsyncioTimerSource
from ..core.extension import Extension
from ..core.ports import Notifier
from ..core.state import ExtensionContext
from ..tasks.gateway import SqliteCliGateway

logger = logging.getLogger(__name__)


@dataclass
class ConsoleSession:
    """What the console slash commands can reach."""

    settings: object
    extension: Extension
    menu: ConsoleMenu
    overlays: ConsoleOverlays
    alerts: ConsoleNotifier


def _ensure_local_dirs(settings) -> None:
    settings.data_dir.mkdir(parents=True, exist_ok=True)


def create_session(*, settings=None, loop: asyncio.AbstractEventLoop | None = None) -> ConsoleSession:
    """
    Build the extension with console host pieces.

    If settings is None, falls back to get_settings().
    """
    if settings is None:
        settings = get_settings()
    if loop is None:
        loop = asyncio.get_running_loop()

    _ensure_local_dirs(settings)

    menu = ConsoleMenu()
    overlays = ConsoleOverlays()
    alerts = ConsoleNotifier()

    def context_factory() -> ExtensionContext:
        notifiers: list[Notifier] = [alerts]
        if settings.desktop_notifications:
            notifiers.append(NotifySendNotifier(loop, app_name=settings.app_name))

        return ExtensionContext(
            settings=settings,
            gateway=SqliteCliGateway(
                db_paths=settings.db_paths,
                sqlite_cmd=settings.sqlite_cmd,
                timeout=settings.query_timeout,
            ),
            menu=menu,
            overlays=overlays,
            timers=AsyncioTimerSource(loop),
            notifier=FanoutNotifier(notifiers),
            launcher=SubprocessLauncher(),
        )

    extension = Extension(
        name=settings.app_name,
        version=settings.version,
        context_factory=context_factory,
    )
    return ConsoleSession(
        settings=settings,
        extension=extension,
        menu=menu,
        overlays=overlays,
        alerts=alerts,
    )
