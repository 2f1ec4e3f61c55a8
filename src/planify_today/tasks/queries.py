# src/planify_today/tasks/queries.py

"""
SQL text for Planify's database.

The sqlite3 shell has no bound-parameter flag for a one-shot query, so values are
interpolated. Task ids are checked against Planify's id format first and every
literal goes through sql_literal(); dates are produced here from date/datetime
objects, never from user text.
"""

from __future__ import annotations

import re
from datetime import date, datetime

TASK_ID_RE = re.compile(r"^[A-Za-z0-9_-]{1,64}$")

_SELECT_ITEMS = (
    "SELECT i.*, l.name AS label_name, l.color AS label_color "
    "FROM Items i "
    "LEFT JOIN Labels l ON i.labels = l.id"
)


class InvalidTaskId(ValueError):
    """Raised when a task id does not look like a Planify id."""


def validate_task_id(task_id: object) -> str:
    text = str(task_id if task_id is not None else "").strip()
    if not TASK_ID_RE.match(text):
        raise InvalidTaskId(f"invalid task id: {task_id!r}")
    return text


def sql_literal(value: str) -> str:
    return "'" + value.replace("'", "''") + "'"


def local_iso(ts: datetime) -> str:
    """Naive local timestamp in the format Planify writes (seconds precision)."""
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts.replace(microsecond=0).isoformat()


def today_tasks_query(day: date) -> str:
    pattern = sql_literal(f"%{day.isoformat()}%")
    return (
        f"{_SELECT_ITEMS} "
        f"WHERE i.due LIKE {pattern} AND i.checked = 0 AND i.is_deleted = 0 "
        "ORDER BY i.day_order ASC;"
    )


def due_between_query(start: datetime, end: datetime) -> str:
    lo = sql_literal(local_iso(start))
    hi = sql_literal(local_iso(end))
    return (
        f"{_SELECT_ITEMS} "
        "WHERE i.checked = 0 AND i.is_deleted = 0 "
        "AND json_valid(i.due) "
        f"AND json_extract(i.due, '$.date') BETWEEN {lo} AND {hi} "
        "ORDER BY json_extract(i.due, '$.date') ASC;"
    )


def mark_done_query(task_id: object) -> str:
    tid = validate_task_id(task_id)
    return f"UPDATE Items SET checked = 1 WHERE id = {sql_literal(tid)};"
