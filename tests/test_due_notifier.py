# tests/test_due_notifier.py

from __future__ import annotations

from datetime import datetime

from planify_today.tasks.due_notifier import DueNotifier, human_due
from planify_today.tasks.gateway import QueryFailed
from planify_today.tasks.task_models import Task
from planify_today.tasks.task_sync import TaskSync

from .fakes import make_row

NOW = datetime(2026, 10, 19, 8, 58, 0)


def _notifier(ctx) -> DueNotifier:
    notifier = DueNotifier(ctx, now=lambda: NOW)
    ctx.due_notifier = notifier
    return notifier


def test_window_is_now_plus_lookahead(ctx) -> None:
    start, end = _notifier(ctx).window()
    assert start == NOW
    assert (end - start).total_seconds() == 5 * 60


def test_window_query_uses_local_iso_bounds(ctx, gateway) -> None:
    _notifier(ctx).check()
    sql = gateway.queries[-1]
    assert "'2026-10-19T08:58:00'" in sql
    assert "'2026-10-19T09:03:00'" in sql


def test_task_in_two_consecutive_windows_notifies_once(ctx, gateway) -> None:
    gateway.due_rows = [make_row("42", "Call Bob")]
    notifier = _notifier(ctx)

    first = notifier.check()
    second = notifier.check()

    assert [n.task_id for n in first] == ["42"]
    assert second == []
    assert len(ctx.notifier.sent) == 1
    assert ctx.notified_ids == {"42"}


def test_notification_carries_title_time_and_two_actions(ctx, gateway) -> None:
    gateway.due_rows = [make_row("42", "Call Bob")]
    [notification] = _notifier(ctx).check()

    assert notification.title == "Call Bob"
    assert notification.body == "Due at 09:00"
    assert [a.key for a in notification.actions] == ["open", "done"]


def test_open_action_launches_planify(ctx, gateway) -> None:
    gateway.due_rows = [make_row("42", "Call Bob")]
    [notification] = _notifier(ctx).check()

    assert notification.invoke("open") is True
    assert ctx.launcher.commands == [ctx.settings.planify_cmd]


def test_done_action_updates_and_resyncs(ctx, gateway) -> None:
    row = make_row("42", "Call Bob")
    gateway.items = [row]
    gateway.due_rows = [row]
    ctx.task_sync = TaskSync(ctx)
    [notification] = _notifier(ctx).check()

    notification.invoke("done")

    assert any(q.startswith("UPDATE Items SET checked = 1 WHERE id = '42'") for q in gateway.queries)
    assert ctx.task_sync.cycles == 1
    assert [e.task_id for e in ctx.rendered if e.task_id] == []


def test_gateway_failure_is_logged_not_raised(ctx, gateway) -> None:
    gateway.error = QueryFailed("boom")
    notifier = _notifier(ctx)
    notifier.start()

    assert ctx.notifier.sent == []
    assert ctx.timers.fire(ctx.notify_timer) is True


def test_timer_runs_independently_and_stop_cancels(ctx, gateway) -> None:
    notifier = _notifier(ctx)
    notifier.start()
    timer = ctx.notify_timer
    gateway.due_rows = [make_row("5", "Stretch")]

    ctx.timers.fire(timer)
    ctx.timers.fire(timer)
    assert len(ctx.notifier.sent) == 1

    notifier.stop()
    assert timer.removed
    assert ctx.notify_timer is None
    assert notifier.check() == []


def test_human_due_without_parsable_time() -> None:
    task = Task.from_row({"id": "1", "content": "x", "due": "{}"})
    assert human_due(task) == "Due soon"
