# src/planify_today/connectors/console_connector.py

"""
Console host: the terminal plays the part of the panel.

- ConsoleMenu keeps the popup menu's children and prints them numbered,
- ConsoleOverlays draws the task detail box and routes /close, /esc, /click,
- ConsoleNotifier prints due-soon alerts and remembers their actions,
- run_console() reads stdin through loop.add_reader, so commands run on the
  same event loop thread as the timers.
"""

from __future__ import annotations

import asyncio
import logging
import os
import sys
import textwrap
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from datetime import datetime
from typing import TextIO

from ..core.ports import DetailView, DueNotification, EntryKind, MenuEntry

logger = logging.getLogger(__name__)

Printer = Callable[[str], None]


def _ts_local() -> str:
    return datetime.now().astimezone().strftime("%Y-%m-%d %H:%M:%S")


def _print_ts(text: str) -> None:
    print(f"[{_ts_local()}] {text}", flush=True)


class ConsoleMenu:
    def __init__(self) -> None:
        self._children: list[MenuEntry] = []

    def attach(self, entry: MenuEntry) -> None:
        self._children.append(entry)

    def detach(self, entry: MenuEntry) -> None:
        try:
            self._children.remove(entry)
        except ValueError:
            logger.debug("detach: entry %r not attached", entry.label)

    def children(self) -> Sequence[MenuEntry]:
        return tuple(self._children)

    def interactive(self) -> list[MenuEntry]:
        return [e for e in self._children if e.interactive]

    def activate(self, number: int) -> MenuEntry | None:
        items = self.interactive()
        if not 1 <= number <= len(items):
            return None
        entry = items[number - 1]
        entry.activate()
        return entry

    def render(self) -> str:
        lines: list[str] = []
        n = 0
        for entry in self._children:
            if entry.kind is EntryKind.SEPARATOR:
                lines.append("    " + "-" * 28)
                continue
            chip = f"[{entry.chip.name}] " if entry.chip else ""
            if entry.interactive:
                n += 1
                lines.append(f"{n:>3}) {chip}{entry.label}")
            else:
                lines.append(f"     {chip}{entry.label}")
        return "\n".join(lines)


@dataclass(eq=False)
class ConsoleOverlay:
    view: DetailView
    on_close: Callable[[], None]
    on_pointer_press: Callable[[float, float], bool]
    on_key: Callable[[str], bool]
    destroyed: bool = False

    def destroy(self) -> None:
        self.destroyed = True

    def action(self, label: str) -> bool:
        for a in self.view.actions:
            if a.label.lower() == label.lower():
                a.callback()
                return True
        return False


def render_detail(view: DetailView, width: int = 60) -> str:
    inner = max(20, width - 4)
    title = f"[{view.chip.name}] {view.title}" if view.chip else view.title
    body: list[str] = []
    for para in view.description.splitlines() or [""]:
        # Wrap, never truncate.
        body.extend(textwrap.wrap(para, inner) or [""])
    actions = "   ".join(f"<{a.label}>" for a in view.actions) + "   <x>"

    border = "+" + "-" * (inner + 2) + "+"
    out = [border]
    out += [f"| {line:<{inner}} |" for line in textwrap.wrap(title, inner) or [""]]
    out.append("|" + "-" * (inner + 2) + "|")
    out += [f"| {line:<{inner}} |" for line in body]
    out.append(f"| {actions:>{inner}} |")
    out.append(border)
    return "\n".join(out)


class ConsoleOverlays:
    def __init__(self, *, monitor: tuple[int, int] = (1920, 1080), printer: Printer = print) -> None:
        self.monitor = monitor
        self._printer = printer
        self._stack: list[ConsoleOverlay] = []

    def monitor_size(self) -> tuple[int, int]:
        return self.monitor

    def show(
        self,
        view: DetailView,
        *,
        on_close: Callable[[], None],
        on_pointer_press: Callable[[float, float], bool],
        on_key: Callable[[str], bool],
    ) -> ConsoleOverlay:
        overlay = ConsoleOverlay(
            view=view,
            on_close=on_close,
            on_pointer_press=on_pointer_press,
            on_key=on_key,
        )
        self._stack.append(overlay)
        self._printer(render_detail(view))
        self._printer("(/done, /app, /close, /esc or /click X Y)")
        return overlay

    @property
    def current(self) -> ConsoleOverlay | None:
        self._stack = [o for o in self._stack if not o.destroyed]
        return self._stack[-1] if self._stack else None


@dataclass
class ConsoleNotifier:
    printer: Printer = _print_ts
    received: list[DueNotification] = field(default_factory=list)

    def notify(self, notification: DueNotification) -> None:
        self.received.append(notification)
        n = len(self.received)
        keys = " | ".join(f"/alert {n} {a.key}" for a in notification.actions)
        self.printer(f"[ALERT #{n}] {notification.title}: {notification.body}  ({keys})")

    def get(self, number: int) -> DueNotification | None:
        if 1 <= number <= len(self.received):
            return self.received[number - 1]
        return None

    def close(self) -> None:
        self.received.clear()


def run_console(
    session,
    stop: asyncio.Event,
    *,
    stream: TextIO | None = None,
) -> Callable[[], None]:
    """
    Start reading commands from stdin on the running loop.

    Pipes and terminals are watched with loop.add_reader and read as raw bytes,
    so every complete line in one read is handled right away. Regular files
    cannot be polled; they are read line by line in the default executor.
    EOF and /exit set `stop`. Returns a function that stops reading.
    """
    from ..cli.commands import registry as command_registry

    loop = asyncio.get_running_loop()
    stream = stream or sys.stdin
    fd = stream.fileno()

    def _prompt() -> None:
        print(">>> ", end="", flush=True)

    def _handle_line(line: str) -> bool:
        """Run one console line. Returns False once the console should stop reading."""
        text = line.strip()
        if text.lower() in ("/exit", "/quit"):
            logger.info("Console exit command received.")
            stop.set()
            return False

        if text:
            try:
                reply = command_registry.handle(session, text)
            except Exception:
                logger.exception("Command handler crashed.")
                reply = "Internal error while handling a command."
            if reply:
                _print_ts(reply)
        _prompt()
        return True

    def _on_eof() -> None:
        logger.info("Console EOF received, exiting.")
        stop.set()

    pending = bytearray()

    def _on_readable() -> None:
        try:
            chunk = os.read(fd, 4096)
        except BlockingIOError:
            return
        except OSError:
            logger.exception("Console read failed.")
            chunk = b""

        if not chunk:
            loop.remove_reader(fd)
            if pending.strip() and not _handle_line(pending.decode(errors="replace")):
                return
            pending.clear()
            _on_eof()
            return

        pending.extend(chunk)
        while b"\n" in pending:
            raw, _, rest = pending.partition(b"\n")
            pending[:] = rest
            if not _handle_line(raw.decode(errors="replace")):
                loop.remove_reader(fd)
                return

    async def _pump_blocking() -> None:
        while not stop.is_set():
            line = await loop.run_in_executor(None, stream.readline)
            if line == "":
                _on_eof()
                return
            if not _handle_line(line):
                return

    pump: asyncio.Task | None = None
    try:
        loop.add_reader(fd, _on_readable)
    except PermissionError:
        # epoll refuses regular files (stdin redirected from a file).
        logger.info("Console input is not pollable; reading it in a worker thread.")
        pump = loop.create_task(_pump_blocking())

    logger.info("Console connector started.")
    _print_ts("[CONSOLE] Type /help for commands, /menu to show today's tasks, /exit to quit.")
    _prompt()

    def _stop_reading() -> None:
        if pump is not None:
            pump.cancel()
        else:
            loop.remove_reader(fd)
        logger.info("Console connector finished.")

    return _stop_reading
