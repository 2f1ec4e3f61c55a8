# tests/test_detail_modal.py

from __future__ import annotations

from planify_today.tasks.task_models import Task
from planify_today.tasks.task_sync import TaskSync
from planify_today.ui.detail_modal import NO_DESCRIPTION, DetailModal, ModalGeometry

from .fakes import make_row

MILK = make_row("7", "Buy milk", label_name="home", label_color="blue", description="Two litres, semi-skimmed")


def _open(ctx, row=MILK) -> DetailModal:
    return DetailModal(ctx, Task.from_row(row)).open()


def test_view_shows_title_chip_and_actions(ctx) -> None:
    modal = _open(ctx)
    [handle] = ctx.overlays.shown
    view = handle.view

    assert view.title == "Buy milk"
    assert view.chip is not None
    assert view.chip.name == "home"
    assert view.chip.style_class == "label-text label-blue"
    assert view.description == "Two litres, semi-skimmed"
    assert view.line_wrap is True and view.ellipsize is False
    assert [a.label for a in view.actions] == ["Done", "Open Planify"]
    assert modal.is_open
    assert ctx.open_modals == [modal]


def test_mark_complete_targets_task_id(ctx, gateway) -> None:
    gateway.items = [dict(MILK)]
    ctx.task_sync = TaskSync(ctx)
    _open(ctx)
    [handle] = ctx.overlays.shown

    handle.view.actions[0].callback()

    assert "UPDATE Items SET checked = 1 WHERE id = '7';" in gateway.queries
    assert handle.destroy_count == 1
    assert ctx.open_modals == []
    assert ctx.task_sync.cycles == 1


def test_failed_update_still_closes_once(ctx, gateway) -> None:
    from planify_today.tasks.gateway import QueryFailed

    gateway.error = QueryFailed("readonly database")
    _open(ctx)
    [handle] = ctx.overlays.shown

    handle.view.actions[0].callback()
    assert handle.destroy_count == 1


def test_open_app_closes_then_launches(ctx) -> None:
    ctx.settings.open_task_arg = "--task"
    _open(ctx)
    [handle] = ctx.overlays.shown

    handle.view.actions[1].callback()

    assert handle.destroy_count == 1
    assert ctx.launcher.commands == [f"{ctx.settings.planify_cmd} --task 7"]


def test_every_dismissal_path_tears_down_exactly_once(ctx) -> None:
    modal = _open(ctx)
    [handle] = ctx.overlays.shown
    geo = modal.geometry
    assert geo is not None

    # Inside the box: nothing happens.
    assert handle.on_pointer_press(geo.x + 10, geo.y + 10) is False
    assert handle.on_key("Return") is False
    assert handle.destroy_count == 0

    assert handle.on_pointer_press(1, 1) is True
    handle.on_close()
    handle.on_key("Escape")
    modal.dismiss()

    assert handle.destroy_count == 1
    assert not modal.is_open


def test_escape_and_close_button(ctx) -> None:
    _open(ctx)
    _open(ctx)
    first, second = ctx.overlays.shown

    assert first.on_key("Escape") is True
    second.on_close()

    assert first.destroy_count == 1
    assert second.destroy_count == 1
    assert ctx.open_modals == []


def test_geometry_is_centered_and_capped() -> None:
    big = ModalGeometry.centered(1920, 1080)
    assert (big.width, big.height) == (500, 200)
    assert (big.x, big.y) == (710, 440)

    small = ModalGeometry.centered(400, 200)
    assert (small.width, small.height) == (320, 160)
    assert small.contains(small.x, small.y)
    assert not small.contains(small.x - 1, small.y)


def test_missing_description_uses_placeholder(ctx) -> None:
    _open(ctx, make_row("8", "No details"))
    assert ctx.overlays.shown[0].view.description == NO_DESCRIPTION
    assert ctx.overlays.shown[0].view.chip is None
