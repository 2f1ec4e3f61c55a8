# src/planify_today/cli/commands.py

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

from ..tasks.task_actions import open_planify

if TYPE_CHECKING:
    from .bootstrap import ConsoleSession

CommandHandler = Callable[["ConsoleSession", list[str]], str]

logger = logging.getLogger(__name__)


class CommandRegistry:
    """Simple slash-command registry used by the console host (/help, /menu, ...)."""

    def __init__(self) -> None:
        self._handlers: dict[str, CommandHandler] = {}
        self._help: dict[str, str] = {}

    def register(
        self,
        name: str,
        handler: CommandHandler,
        help_text: str,
        aliases: list[str] | None = None,
    ) -> None:
        aliases = aliases or []
        key = name.lower()
        self._handlers[key] = handler
        self._help[key] = help_text
        for alias in aliases:
            self._handlers[alias.lower()] = handler

    def handle(self, session: ConsoleSession, line: str) -> str | None:
        """
        Handle a string like "/command args".
        A bare number is shorthand for "/activate N".
        Returns a reply string or None if not a command.
        """
        if line.isdigit():
            line = f"/activate {line}"
        if not line.startswith("/"):
            return None

        parts = line[1:].split()
        if not parts:
            return "Empty command. Use /help to list available commands."

        name = parts[0].lower()
        args = parts[1:]

        handler = self._handlers.get(name)
        if not handler:
            return f"Unknown command: /{name}. Use /help to list available commands."
        return handler(session, args)

    def build_help(self) -> str:
        lines = ["Available commands:"]
        for name, help_text in self._help.items():
            lines.append(f"  /{name} - {help_text}")
        return "\n".join(lines)


registry = CommandRegistry()

NOT_ENABLED = "Extension is not enabled."
NO_OVERLAY = "No task is open. Pick one from /menu first."


def _parse_int(raw: str) -> int | None:
    try:
        return int(raw)
    except ValueError:
        return None


def cmd_help(session: ConsoleSession, args: list[str]) -> str:
    return registry.build_help()


def cmd_menu(session: ConsoleSession, args: list[str]) -> str:
    body = session.menu.render()
    return "Menu:\n" + body if body else "Menu is empty."


def cmd_refresh(session: ConsoleSession, args: list[str]) -> str:
    ctx = session.extension.ctx
    if ctx is None:
        return NOT_ENABLED
    ctx.refresh()
    return "Refreshed.\n" + session.menu.render()


def cmd_activate(session: ConsoleSession, args: list[str]) -> str:
    if not args or _parse_int(args[0]) is None:
        return "Usage: /activate N"
    entry = session.menu.activate(int(args[0]))
    if entry is None:
        return f"No menu item #{args[0]}."
    if session.overlays.current is not None:
        return ""
    return session.menu.render()


def _overlay_action(session: ConsoleSession, label: str) -> str:
    overlay = session.overlays.current
    if overlay is None:
        return NO_OVERLAY
    if not overlay.action(label):
        return f"No '{label}' action on this task."
    return f"{label}.\n" + session.menu.render()


def cmd_done(session: ConsoleSession, args: list[str]) -> str:
    return _overlay_action(session, "Done")


def cmd_app(session: ConsoleSession, args: list[str]) -> str:
    overlay = session.overlays.current
    if overlay is None:
        ctx = session.extension.ctx
        if ctx is None:
            return NOT_ENABLED
        open_planify(ctx)
        return "Opening Planify."
    return _overlay_action(session, "Open Planify")


def cmd_close(session: ConsoleSession, args: list[str]) -> str:
    overlay = session.overlays.current
    if overlay is None:
        return NO_OVERLAY
    overlay.on_close()
    return "Closed."


def cmd_esc(session: ConsoleSession, args: list[str]) -> str:
    overlay = session.overlays.current
    if overlay is None:
        return NO_OVERLAY
    return "Closed." if overlay.on_key("Escape") else ""


def cmd_click(session: ConsoleSession, args: list[str]) -> str:
    overlay = session.overlays.current
    if overlay is None:
        return NO_OVERLAY
    if len(args) != 2 or _parse_int(args[0]) is None or _parse_int(args[1]) is None:
        return "Usage: /click X Y"
    handled = overlay.on_pointer_press(float(args[0]), float(args[1]))
    return "Closed (clicked outside)." if handled else "Clicked inside the task box."


def cmd_alerts(session: ConsoleSession, args: list[str]) -> str:
    if not session.alerts.received:
        return "No due-soon alerts yet."
    lines = ["Alerts:"]
    for i, n in enumerate(session.alerts.received, start=1):
        lines.append(f"  #{i} {n.title}: {n.body}")
    return "\n".join(lines)


def cmd_alert(session: ConsoleSession, args: list[str]) -> str:
    if len(args) != 2 or _parse_int(args[0]) is None:
        return "Usage: /alert N open|done"
    notification = session.alerts.get(int(args[0]))
    if notification is None:
        return f"No alert #{args[0]}."
    if not notification.invoke(args[1].lower()):
        return f"Unknown action '{args[1]}'. Use open or done."
    return f"Alert #{args[0]}: {args[1].lower()}."


def cmd_status(session: ConsoleSession, args: list[str]) -> str:
    ext = session.extension
    ctx = ext.ctx
    if ctx is None:
        return f"{ext.name} {ext.version}: disabled"
    db = ctx.gateway.find_database()
    return (
        "Status:\n"
        f"  {ext.name} {ext.version}\n"
        f"  sqlite3: {'found' if ctx.gateway.tool_available() else 'MISSING'}\n"
        f"  database: {db or 'not found'}\n"
        f"  refresh every {ctx.settings.refresh_interval}s, cycles run: "
        f"{ctx.task_sync.cycles if ctx.task_sync else 0}\n"
        f"  due-soon alerts: {'on' if ctx.due_notifier else 'off'}, notified: {len(ctx.notified_ids)}"
    )


registry.register("help", cmd_help, "Show this help message", aliases=["h", "?"])
registry.register("menu", cmd_menu, "Show the panel menu", aliases=["m", "list"])
registry.register("refresh", cmd_refresh, "Reload today's tasks now", aliases=["r"])
registry.register("activate", cmd_activate, "Activate menu item N (or just type N)", aliases=["a"])
registry.register("done", cmd_done, "Mark the open task as done")
registry.register("app", cmd_app, "Open Planify (on the open task, if any)")
registry.register("close", cmd_close, "Close the task box")
registry.register("esc", cmd_esc, "Press Escape on the task box")
registry.register("click", cmd_click, "Click at X Y (outside the task box closes it)")
registry.register("alerts", cmd_alerts, "List due-soon alerts")
registry.register("alert", cmd_alert, "Run an alert action: /alert N open|done")
registry.register("status", cmd_status, "Show sqlite3/database/loop status")
