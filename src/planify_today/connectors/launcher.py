# src/planify_today/connectors/launcher.py

from __future__ import annotations

import logging
import shlex
import subprocess

logger = logging.getLogger(__name__)


class SubprocessLauncher:
    """Fire-and-forget command lines (the app, the sqlite3 installer)."""

    def __init__(self) -> None:
        self.children: list[subprocess.Popen] = []

    def spawn(self, command_line: str) -> None:
        argv = shlex.split(command_line)
        if not argv:
            logger.warning("Empty command line; nothing to launch")
            return
        proc = subprocess.Popen(
            argv,
            stdin=subprocess.DEVNULL,
            stdout=subprocess.DEVNULL,
            stderr=subprocess.DEVNULL,
            start_new_session=True,
        )
        logger.debug("Spawned pid=%s: %s", proc.pid, argv[0])
        # Reap finished children so they do not linger as zombies.
        self.children = [p for p in self.children if p.poll() is None]
        self.children.append(proc)
