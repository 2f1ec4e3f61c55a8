# src/planify_today/tasks/due_notifier.py

from __future__ import annotations

"""
Due-soon notifier.

Every notify_interval seconds, independent of the sync timer:
- query open tasks due within [now, now + lookahead],
- alert once per task id per enable/disable lifetime,
- keep ticking (the timer callback returns SOURCE_CONTINUE).
"""

import logging
from collections.abc import Callable
from datetime import datetime, timedelta

from ..core.ports import SOURCE_CONTINUE, DueNotification, NotificationAction
from ..core.state import ExtensionContext
from .gateway import GatewayError
from .queries import due_between_query
from .task_actions import mark_task_done, open_planify
from .task_models import Task, tasks_from_rows

logger = logging.getLogger(__name__)


def local_now() -> datetime:
    return datetime.now()


def human_due(task: Task) -> str:
    if task.due_at is None:
        return "Due soon"
    return f"Due at {task.due_at.strftime('%H:%M')}"


class DueNotifier:
    def __init__(self, ctx: ExtensionContext, *, now: Callable[[], datetime] = local_now) -> None:
        self.ctx = ctx
        self._now = now
        self.stopped = False

    def start(self) -> None:
        self._cancel_timer()
        interval = float(self.ctx.settings.notify_interval)
        self.ctx.notify_timer = self.ctx.timers.add_seconds(interval, self._on_tick)
        self.check()

    def stop(self) -> None:
        self.stopped = True
        self._cancel_timer()

    def window(self) -> tuple[datetime, datetime]:
        start = self._now()
        return start, start + timedelta(minutes=int(self.ctx.settings.notify_lookahead_minutes))

    def check(self) -> list[DueNotification]:
        """One pass over the lookahead window. Returns the notifications it sent."""
        if self.stopped:
            return []

        start, end = self.window()
        try:
            result = self.ctx.gateway.execute(due_between_query(start, end))
        except GatewayError as e:
            logger.warning("Due-soon check skipped: %s", e)
            return []

        if not result.parsed:
            logger.warning("Due-soon check got unreadable output: %.200s", result.raw_text)
            return []

        sent: list[DueNotification] = []
        for task in tasks_from_rows(result.rows):
            if not task.id or task.id in self.ctx.notified_ids:
                continue
            notification = self.build_notification(task)
            self.ctx.notified_ids.add(task.id)
            try:
                self.ctx.notifier.notify(notification)
            except Exception:
                logger.exception("Notifier failed for task %s", task.id)
                continue
            logger.info("Notified due-soon task %s (%s)", task.id, notification.body)
            sent.append(notification)
        return sent

    def build_notification(self, task: Task) -> DueNotification:
        ctx = self.ctx

        def _open() -> None:
            open_planify(ctx, task.id)

        def _done() -> None:
            mark_task_done(ctx, task.id, title=task.title)

        return DueNotification(
            task_id=task.id,
            title=task.title,
            body=human_due(task),
            actions=[
                NotificationAction("open", "Open Planify", _open),
                NotificationAction("done", "Mark done", _done),
            ],
        )

    def _on_tick(self) -> bool:
        try:
            self.check()
        except Exception:
            logger.exception("Due-soon check crashed")
        return SOURCE_CONTINUE

    def _cancel_timer(self) -> None:
        handle = self.ctx.notify_timer
        if handle is None:
            return
        self.ctx.notify_timer = None
        self.ctx.timers.remove(handle)
