# src/planify_today/ui/detail_modal.py

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..core.ports import DetailView, LabelChip, ModalAction, OverlayHandle
from ..core.state import ExtensionContext
from ..tasks.task_actions import mark_task_done, open_planify
from ..tasks.task_models import Task

logger = logging.getLogger(__name__)

MODAL_MAX_WIDTH = 500
MODAL_MAX_HEIGHT = 200
MODAL_SCREEN_FRACTION = 0.8
NO_DESCRIPTION = "No description available"
CANCEL_KEY = "Escape"


@dataclass(slots=True, frozen=True)
class ModalGeometry:
    x: int
    y: int
    width: int
    height: int

    @classmethod
    def centered(cls, monitor_width: int, monitor_height: int) -> ModalGeometry:
        width = int(min(MODAL_MAX_WIDTH, monitor_width * MODAL_SCREEN_FRACTION))
        height = int(min(MODAL_MAX_HEIGHT, monitor_height * MODAL_SCREEN_FRACTION))
        return cls(
            x=monitor_width // 2 - width // 2,
            y=monitor_height // 2 - height // 2,
            width=width,
            height=height,
        )

    def contains(self, x: float, y: float) -> bool:
        return self.x <= x <= self.x + self.width and self.y <= y <= self.y + self.height


class DetailModal:
    """
    Centered overlay with one task's details and two actions.

    Every dismissal path (close control, click outside, Escape, either action,
    extension disable) goes through dismiss(), which destroys the overlay once.
    """

    def __init__(self, ctx: ExtensionContext, task: Task) -> None:
        self.ctx = ctx
        self.task = task
        self.view: DetailView | None = None
        self.geometry: ModalGeometry | None = None
        self._handle: OverlayHandle | None = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def build_view(self) -> DetailView:
        task = self.task
        width, height = self.ctx.overlays.monitor_size()
        self.geometry = ModalGeometry.centered(width, height)

        chip = None
        if task.label_name and task.label_color:
            chip = LabelChip(task.label_name, task.label_color)

        return DetailView(
            title=task.title,
            description=task.description or NO_DESCRIPTION,
            chip=chip,
            actions=[
                ModalAction("Done", self.mark_done, style_class="task-modal-button task-done-button"),
                ModalAction("Open Planify", self.open_app),
            ],
            x=self.geometry.x,
            y=self.geometry.y,
            width=self.geometry.width,
            height=self.geometry.height,
            line_wrap=True,
            ellipsize=False,
        )

    def open(self) -> DetailModal:
        if self._handle is not None:
            return self

        logger.info("Showing details for task: %s", self.task.title)
        self.view = self.build_view()
        self._handle = self.ctx.overlays.show(
            self.view,
            on_close=self.dismiss,
            on_pointer_press=self.handle_pointer_press,
            on_key=self.handle_key,
        )
        self.ctx.open_modals.append(self)
        return self

    def dismiss(self) -> None:
        handle = self._handle
        if handle is None:
            return
        self._handle = None
        if self in self.ctx.open_modals:
            self.ctx.open_modals.remove(self)
        try:
            handle.destroy()
        except Exception:
            logger.exception("Failed to destroy task overlay")

    # ---- event handlers (return True to stop propagation) ----

    def handle_pointer_press(self, x: float, y: float) -> bool:
        if self.geometry is None or self.geometry.contains(x, y):
            return False
        self.dismiss()
        return True

    def handle_key(self, key: str) -> bool:
        if key != CANCEL_KEY:
            return False
        self.dismiss()
        return True

    # ---- actions ----

    def mark_done(self) -> None:
        if self.task.id:
            mark_task_done(self.ctx, self.task.id, title=self.task.title)
        self.dismiss()

    def open_app(self) -> None:
        self.dismiss()
        open_planify(self.ctx, self.task.id or None)
