# src/planify_today/core/ports.py

from __future__ import annotations

"""
Ports (interfaces) used by the core.

The loops and the modal depend on Protocols instead of a concrete UI toolkit.
A host supplies widgets, overlays, timers and notifications; the tests supply fakes.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from enum import StrEnum
from typing import Any, Protocol

# Timer callbacks return one of these; returning SOURCE_CONTINUE is the only way to re-arm.
SOURCE_CONTINUE = True
SOURCE_REMOVE = False

TimerCallback = Callable[[], bool]


class EntryKind(StrEnum):
    HEADER = "header"
    SEPARATOR = "separator"
    TASK = "task"
    STATUS = "status"
    ACTION = "action"


@dataclass(slots=True, frozen=True)
class LabelChip:
    name: str
    color: str

    @property
    def style_class(self) -> str:
        return f"label-text label-{self.color}"


@dataclass(slots=True, eq=False)
class MenuEntry:
    """
    A menu item as the core sees it.

    Entries compare by identity: two "No tasks for today" lines from two cycles
    are two different widgets.
    """

    kind: EntryKind
    label: str = ""
    sensitive: bool = True
    chip: LabelChip | None = None
    task_id: str | None = None
    on_activate: Callable[[], None] | None = None

    @property
    def interactive(self) -> bool:
        return self.sensitive and self.on_activate is not None

    def activate(self) -> None:
        if self.interactive and self.on_activate is not None:
            self.on_activate()


class MenuPort(Protocol):
    """The panel button's popup menu."""

    def attach(self, entry: MenuEntry) -> None: ...

    # Detaching destroys the host widget; the entry is never re-attached.
    def detach(self, entry: MenuEntry) -> None: ...

    def children(self) -> Sequence[MenuEntry]: ...


@dataclass(slots=True)
class ModalAction:
    label: str
    callback: Callable[[], None]
    style_class: str = "task-modal-button"


@dataclass(slots=True)
class DetailView:
    """Everything an overlay needs to draw the task detail box."""

    title: str
    description: str
    chip: LabelChip | None
    actions: list[ModalAction]
    x: int
    y: int
    width: int
    height: int
    line_wrap: bool = True
    ellipsize: bool = False


class OverlayHandle(Protocol):
    def destroy(self) -> None: ...


class OverlayPort(Protocol):
    def monitor_size(self) -> tuple[int, int]: ...

    def show(
        self,
        view: DetailView,
        *,
        on_close: Callable[[], None],
        on_pointer_press: Callable[[float, float], bool],
        on_key: Callable[[str], bool],
    ) -> OverlayHandle: ...


class TimerSource(Protocol):
    """Host-scheduled periodic callbacks."""

    def add_seconds(self, interval: float, callback: TimerCallback) -> Any: ...

    def remove(self, handle: Any) -> None: ...


@dataclass(slots=True)
class NotificationAction:
    key: str
    label: str
    callback: Callable[[], None]


@dataclass(slots=True)
class DueNotification:
    task_id: str
    title: str
    body: str
    actions: list[NotificationAction] = field(default_factory=list)

    def invoke(self, key: str) -> bool:
        for action in self.actions:
            if action.key == key:
                action.callback()
                return True
        return False


class Notifier(Protocol):
    def notify(self, notification: DueNotification) -> None: ...

    def close(self) -> None: ...


class Launcher(Protocol):
    """Spawns a command line without waiting for it."""

    def spawn(self, command_line: str) -> None: ...
