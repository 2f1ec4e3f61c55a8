# src/planify_today/connectors/desktop_notifier.py

"""
Desktop notifications through notify-send.

Each alert runs `notify-send --wait` with two --action buttons. The chosen
action key comes back on the child's stdout; we watch that pipe with
loop.add_reader so the callback runs on the event loop thread.
"""

from __future__ import annotations

import asyncio
import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from ..core.ports import DueNotification, Notifier

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Pending:
    notification: DueNotification
    proc: subprocess.Popen
    fd: int


class NotifySendNotifier:
    def __init__(
        self,
        loop: asyncio.AbstractEventLoop,
        *,
        app_name: str = "Planify",
        icon: str = "io.github.alainm23.planify",
        command: str = "notify-send",
        popen: Callable[..., subprocess.Popen] = subprocess.Popen,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self._loop = loop
        self.app_name = app_name
        self.icon = icon
        self.command = command
        self._popen = popen
        self._which = which
        self._pending: dict[int, _Pending] = {}
        # Children whose reply was read but which may not have exited yet.
        self.finishing: list[subprocess.Popen] = []
        self._warned_missing = False

    def available(self) -> bool:
        return self._which(self.command) is not None

    def build_argv(self, notification: DueNotification) -> list[str]:
        argv = [self.command, f"--app-name={self.app_name}", f"--icon={self.icon}"]
        for action in notification.actions:
            argv.append(f"--action={action.key}={action.label}")
        argv += ["--wait", notification.title, notification.body]
        return argv

    def notify(self, notification: DueNotification) -> None:
        self._reap()
        if not self.available():
            if not self._warned_missing:
                logger.warning("%s not found; desktop notifications disabled", self.command)
                self._warned_missing = True
            return

        try:
            proc = self._popen(
                self.build_argv(notification),
                stdin=subprocess.DEVNULL,
                stdout=subprocess.PIPE,
                stderr=subprocess.DEVNULL,
                text=True,
            )
        except OSError:
            logger.exception("Failed to run %s", self.command)
            return

        if proc.stdout is None:
            return
        fd = proc.stdout.fileno()
        self._pending[fd] = _Pending(notification=notification, proc=proc, fd=fd)
        self._loop.add_reader(fd, self._on_readable, fd)

    def _on_readable(self, fd: int) -> None:
        pending = self._pending.pop(fd, None)
        self._loop.remove_reader(fd)
        if pending is None:
            return

        stdout = pending.proc.stdout
        key = ""
        if stdout is not None:
            key = (stdout.readline() or "").strip()
            stdout.close()
        self.finishing.append(pending.proc)
        self._reap()

        if not key:
            logger.debug("Notification for task %s dismissed", pending.notification.task_id)
            return

        logger.info("Notification action %r for task %s", key, pending.notification.task_id)
        try:
            if not pending.notification.invoke(key):
                logger.warning("Unknown notification action %r", key)
        except Exception:
            logger.exception("Notification action %r failed", key)

    def close(self) -> None:
        for fd, pending in list(self._pending.items()):
            self._loop.remove_reader(fd)
            if pending.proc.poll() is None:
                pending.proc.terminate()
            if pending.proc.stdout is not None:
                pending.proc.stdout.close()
            self.finishing.append(pending.proc)
        self._pending.clear()
        for proc in self.finishing:
            try:
                proc.wait(timeout=1)
            except subprocess.TimeoutExpired:
                proc.kill()
                proc.wait()
        self.finishing.clear()

    def _reap(self) -> None:
        self.finishing = [p for p in self.finishing if p.poll() is None]


class FanoutNotifier:
    """Sends each notification to several notifiers; one failing does not stop the rest."""

    def __init__(self, notifiers: Sequence[Notifier]) -> None:
        self.notifiers = list(notifiers)

    def notify(self, notification: DueNotification) -> None:
        for n in self.notifiers:
            try:
                n.notify(notification)
            except Exception:
                logger.exception("Notifier %s failed", type(n).__name__)

    def close(self) -> None:
        for n in self.notifiers:
            try:
                n.close()
            except Exception:
                logger.exception("Notifier %s close failed", type(n).__name__)
