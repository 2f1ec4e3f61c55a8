# src/planify_today/tasks/task_models.py

from __future__ import annotations

import json
import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from typing import Any

logger = logging.getLogger(__name__)


def _as_bool(raw: Any) -> bool:
    if isinstance(raw, str):
        return raw.strip().lower() in {"1", "true", "yes"}
    try:
        return bool(int(raw))
    except (TypeError, ValueError):
        return False


def _as_int(raw: Any, default: int = 0) -> int:
    try:
        return int(raw)
    except (TypeError, ValueError):
        return default


def _opt_str(raw: Any) -> str | None:
    if raw is None:
        return None
    text = str(raw)
    return text if text.strip() else None


def parse_due(raw: str | None) -> datetime | None:
    """
    Parse Planify's `due` column into a naive local datetime.

    Planify stores a JSON object ({"date": "2024-05-01T15:30:00", ...}); older
    rows and hand-written fixtures may hold the bare ISO string instead.
    """
    if not raw:
        return None

    value: Any = raw
    text = raw.strip()
    if text.startswith("{"):
        try:
            value = (json.loads(text) or {}).get("date")
        except (ValueError, AttributeError):
            return None

    if not isinstance(value, str) or not value.strip():
        return None

    try:
        parsed = datetime.fromisoformat(value.strip())
    except ValueError:
        return None

    if parsed.tzinfo is not None:
        parsed = parsed.astimezone().replace(tzinfo=None)
    return parsed


@dataclass(slots=True, frozen=True)
class Task:
    """One row of Planify's Items table (joined with its label)."""

    id: str
    title: str
    description: str | None
    due: str | None
    due_at: datetime | None
    checked: bool
    is_deleted: bool
    label_name: str | None
    label_color: str | None
    day_order: int = 0

    @property
    def has_label(self) -> bool:
        return bool(self.label_name and self.label_color)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Task:
        title = _opt_str(row.get("content")) or _opt_str(row.get("title")) or "Unknown Task"
        due = _opt_str(row.get("due"))
        return cls(
            id=str(row.get("id") or ""),
            title=title,
            description=_opt_str(row.get("description")),
            due=due,
            due_at=parse_due(due),
            checked=_as_bool(row.get("checked", 0)),
            is_deleted=_as_bool(row.get("is_deleted", 0)),
            label_name=_opt_str(row.get("label_name")),
            label_color=_opt_str(row.get("label_color")),
            day_order=_as_int(row.get("day_order")),
        )


def tasks_from_rows(rows: list[dict[str, Any]]) -> list[Task]:
    out: list[Task] = []
    for row in rows:
        if not isinstance(row, Mapping):
            logger.debug("Skipping non-object row: %r", row)
            continue
        out.append(Task.from_row(row))
    return out
