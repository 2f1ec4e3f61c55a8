# src/planify_today/core/state.py

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from .ports import Launcher, MenuEntry, MenuPort, Notifier, OverlayPort, TimerSource

if TYPE_CHECKING:
    from ..tasks.due_notifier import DueNotifier
    from ..tasks.gateway import SqliteCliGateway
    from ..tasks.task_sync import TaskSync
    from ..ui.detail_modal import DetailModal


@dataclass
class ExtensionContext:
    """
    Everything one enable/disable lifetime owns.

    Built by Extension.enable(), torn down by Extension.disable(). The loops
    read their collaborators from here instead of module globals.
    """

    settings: Any
    gateway: SqliteCliGateway
    menu: MenuPort
    overlays: OverlayPort
    timers: TimerSource
    notifier: Notifier
    launcher: Launcher

    static_entries: list[MenuEntry] = field(default_factory=list)
    rendered: list[MenuEntry] = field(default_factory=list)
    notified_ids: set[str] = field(default_factory=set)
    open_modals: list[DetailModal] = field(default_factory=list)

    sync_timer: Any = None
    notify_timer: Any = None

    task_sync: TaskSync | None = None
    due_notifier: DueNotifier | None = None

    def refresh(self) -> None:
        """Run a Task Sync cycle now (no-op once disabled)."""
        if self.task_sync is not None:
            self.task_sync.run_cycle()
