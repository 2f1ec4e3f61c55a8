# src/planify_today/tasks/task_sync.py

from __future__ import annotations

"""
Task sync loop.

Each cycle:
- detaches every entry the previous cycle rendered,
- queries today's open tasks,
- renders either one entry per task or a single status line,
- appends the refresh control,
- makes sure exactly one refresh timer is armed.

Rendering is destroy-and-rebuild; lists are short.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import date, datetime
from enum import StrEnum

from ..core.ports import SOURCE_CONTINUE, EntryKind, LabelChip, MenuEntry
from ..core.state import ExtensionContext
from .gateway import DatabaseMissing, GatewayError, QueryFailed, ToolMissing
from .queries import today_tasks_query
from .task_actions import install_sqlite
from .task_models import Task, tasks_from_rows

logger = logging.getLogger(__name__)

HEADER_TEXT = "Today's Tasks"
REFRESH_TEXT = "Refresh Tasks"
NO_TASKS_TEXT = "No tasks for today"
TOOL_MISSING_TEXT = "sqlite3 command not found. Please install it."
INSTALL_TEXT = "Install sqlite3"
DB_MISSING_TEXT = "Planify database not found"
UNREADABLE_TEXT = "Could not read tasks from sqlite3"


class SyncPhase(StrEnum):
    IDLE = "idle"
    FETCHING = "fetching"
    RENDERING = "rendering"


@dataclass(slots=True)
class FetchOutcome:
    tasks: list[Task] = field(default_factory=list)
    status: str | None = None
    offer_install: bool = False


def local_today() -> date:
    """Today's date on the local wall clock (the date Planify shows the user)."""
    return datetime.now().astimezone().date()


class TaskSync:
    def __init__(
        self,
        ctx: ExtensionContext,
        *,
        open_detail: Callable[[Task], None] | None = None,
        today: Callable[[], date] = local_today,
    ) -> None:
        self.ctx = ctx
        self.phase = SyncPhase.IDLE
        self.cycles = 0
        self.stopped = False
        self._open_detail = open_detail or self._default_open_detail
        self._today = today

    # ---- lifecycle ----

    def start(self) -> None:
        self.run_cycle()

    def stop(self) -> None:
        self.stopped = True
        self._cancel_timer()
        self._teardown()

    # ---- cycle ----

    def run_cycle(self, *, from_timer: bool = False) -> None:
        if self.stopped:
            return
        if self.phase is not SyncPhase.IDLE:
            logger.debug("Sync cycle already running (phase=%s); skipping", self.phase)
            return

        try:
            self._teardown()

            self.phase = SyncPhase.FETCHING
            day = self._today()
            outcome = self.fetch(day)

            self.phase = SyncPhase.RENDERING
            self._render(day, outcome)
            self.cycles += 1
        finally:
            self.phase = SyncPhase.IDLE
            # A tick keeps its own timer alive by returning SOURCE_CONTINUE.
            if not from_timer:
                self._arm_timer()

    def fetch(self, day: date) -> FetchOutcome:
        try:
            result = self.ctx.gateway.execute(today_tasks_query(day))
        except ToolMissing as e:
            logger.warning("Cannot load tasks: %s", e)
            return FetchOutcome(status=TOOL_MISSING_TEXT, offer_install=True)
        except DatabaseMissing as e:
            logger.warning("Cannot load tasks: %s (looked in %s)", e, ", ".join(map(str, e.candidates)))
            return FetchOutcome(status=DB_MISSING_TEXT)
        except QueryFailed as e:
            logger.error("Error loading tasks: %s", e.message)
            return FetchOutcome(status=f"Error loading tasks: {e.message}")
        except GatewayError as e:
            logger.error("Error loading tasks: %s", e)
            return FetchOutcome(status=f"Error loading tasks: {e}")
        except Exception as e:
            logger.exception("Unexpected error loading tasks")
            return FetchOutcome(status=f"Error loading tasks: {e}")

        if not result.parsed:
            logger.warning("Unreadable sqlite3 output: %.200s", result.raw_text)
            return FetchOutcome(status=UNREADABLE_TEXT)

        return FetchOutcome(tasks=tasks_from_rows(result.rows))

    # ---- rendering ----

    def _render(self, day: date, outcome: FetchOutcome) -> None:
        self._add(MenuEntry(EntryKind.HEADER, HEADER_TEXT, sensitive=False))
        self._add(MenuEntry(EntryKind.SEPARATOR, sensitive=False))

        if outcome.status is not None:
            self._add(MenuEntry(EntryKind.STATUS, outcome.status, sensitive=False))
            if outcome.offer_install:
                self._add(
                    MenuEntry(EntryKind.ACTION, INSTALL_TEXT, on_activate=lambda: install_sqlite(self.ctx))
                )
        elif outcome.tasks:
            logger.info("Found %d tasks for %s", len(outcome.tasks), day.isoformat())
            for task in outcome.tasks:
                self._add(self._task_entry(task))
        else:
            logger.info("No tasks found for %s", day.isoformat())
            self._add(MenuEntry(EntryKind.STATUS, NO_TASKS_TEXT, sensitive=False))

        self._add(MenuEntry(EntryKind.SEPARATOR, sensitive=False))
        self._add(MenuEntry(EntryKind.ACTION, REFRESH_TEXT, on_activate=self.run_cycle))

    def _add(self, entry: MenuEntry) -> None:
        self.ctx.menu.attach(entry)
        self.ctx.rendered.append(entry)

    def _task_entry(self, task: Task) -> MenuEntry:
        chip = None
        if task.label_name and task.label_color:
            chip = LabelChip(task.label_name, task.label_color)

        def _activate() -> None:
            self._open_detail(task)

        return MenuEntry(EntryKind.TASK, task.title, chip=chip, task_id=task.id, on_activate=_activate)

    def _default_open_detail(self, task: Task) -> None:
        from ..ui.detail_modal import DetailModal

        DetailModal(self.ctx, task).open()

    def _teardown(self) -> None:
        entries = list(self.ctx.rendered)
        self.ctx.rendered.clear()
        for entry in entries:
            try:
                self.ctx.menu.detach(entry)
            except Exception:
                logger.exception("Failed to detach menu entry %r", entry.label)

    # ---- timer ----

    def _on_tick(self) -> bool:
        try:
            self.run_cycle(from_timer=True)
        except Exception:
            logger.exception("Sync cycle crashed")
        return SOURCE_CONTINUE

    def _arm_timer(self) -> None:
        self._cancel_timer()
        interval = float(self.ctx.settings.refresh_interval)
        self.ctx.sync_timer = self.ctx.timers.add_seconds(interval, self._on_tick)

    def _cancel_timer(self) -> None:
        handle = self.ctx.sync_timer
        if handle is None:
            return
        self.ctx.sync_timer = None
        self.ctx.timers.remove(handle)
