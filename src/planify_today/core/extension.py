# src/planify_today/core/extension.py

"""
Extension lifecycle: init / enable / disable.

enable() builds an ExtensionContext from a factory and starts the loops;
disable() reverses every step, each one isolated so a partial enable can
still be torn down.
"""

from __future__ import annotations

import logging
from collections.abc import Callable

from ..tasks.due_notifier import DueNotifier
from ..tasks.task_actions import open_planify
from ..tasks.task_sync import TaskSync
from .ports import EntryKind, MenuEntry
from .state import ExtensionContext

logger = logging.getLogger(__name__)

ContextFactory = Callable[[], ExtensionContext]


class Extension:
    def __init__(self, *, name: str, version: str, context_factory: ContextFactory) -> None:
        self.name = name
        self.version = version
        self._context_factory = context_factory
        self.ctx: ExtensionContext | None = None

    @property
    def enabled(self) -> bool:
        return self.ctx is not None

    def init(self) -> None:
        logger.info("Initializing %s version %s", self.name, self.version)

    def enable(self) -> None:
        if self.ctx is not None:
            logger.debug("%s already enabled", self.name)
            return

        logger.info("Enabling %s version %s", self.name, self.version)
        ctx = self._context_factory()
        self.ctx = ctx

        self._add_static_entries(ctx)

        ctx.task_sync = TaskSync(ctx)
        ctx.task_sync.start()

        if getattr(ctx.settings, "notify_enabled", True):
            ctx.due_notifier = DueNotifier(ctx)
            ctx.due_notifier.start()

    def disable(self) -> None:
        ctx = self.ctx
        logger.info("Disabling %s version %s", self.name, self.version)
        if ctx is None:
            return
        self.ctx = None

        try:
            if ctx.due_notifier is not None:
                ctx.due_notifier.stop()
            elif ctx.notify_timer is not None:
                ctx.timers.remove(ctx.notify_timer)
                ctx.notify_timer = None
        except Exception:
            logger.exception("Failed to stop due-soon notifier")

        try:
            if ctx.task_sync is not None:
                ctx.task_sync.stop()
            elif ctx.sync_timer is not None:
                ctx.timers.remove(ctx.sync_timer)
                ctx.sync_timer = None
        except Exception:
            logger.exception("Failed to stop task sync")

        for modal in list(ctx.open_modals):
            try:
                modal.dismiss()
            except Exception:
                logger.exception("Failed to dismiss task overlay")
        ctx.open_modals.clear()

        for entry in list(ctx.rendered) + list(ctx.static_entries):
            try:
                ctx.menu.detach(entry)
            except Exception:
                logger.exception("Failed to detach menu entry %r", entry.label)
        ctx.rendered.clear()
        ctx.static_entries.clear()

        ctx.notified_ids.clear()

        try:
            ctx.notifier.close()
        except Exception:
            logger.exception("Failed to close notifier")

        ctx.task_sync = None
        ctx.due_notifier = None

    @staticmethod
    def _add_static_entries(ctx: ExtensionContext) -> None:
        entries = [
            MenuEntry(EntryKind.ACTION, "Open Planify", on_activate=lambda: open_planify(ctx)),
            MenuEntry(EntryKind.SEPARATOR, sensitive=False),
        ]
        for entry in entries:
            ctx.menu.attach(entry)
            ctx.static_entries.append(entry)
