# tests/test_console_connector.py

from __future__ import annotations

import asyncio
import os
import typing
from pathlib import Path

import pytest

from planify_today.connectors.console_connector import ConsoleOverlays, render_detail, run_console
from planify_today.core.ports import DetailView, LabelChip, OverlayPort

from .fakes import FakeOverlays


@pytest.fixture()
def pipe():
    r, w = os.pipe()
    reader = os.fdopen(r, "r")
    yield reader, w
    reader.close()
    try:
        os.close(w)
    except OSError:
        pass


@pytest.mark.asyncio
async def test_commands_written_together_all_run(pipe, capsys) -> None:
    reader, w = pipe
    stop = asyncio.Event()
    stop_reading = run_console(object(), stop, stream=reader)

    os.write(w, b"/help\n/exit\n")
    await asyncio.wait_for(stop.wait(), 1.0)
    stop_reading()

    assert "Available commands:" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_line_split_across_writes(pipe, capsys) -> None:
    reader, w = pipe
    stop = asyncio.Event()
    stop_reading = run_console(object(), stop, stream=reader)

    os.write(w, b"/he")
    await asyncio.sleep(0.05)
    assert "Available commands:" not in capsys.readouterr().out

    os.write(w, b"lp\n/exit\n")
    await asyncio.wait_for(stop.wait(), 1.0)
    stop_reading()

    assert "Available commands:" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_eof_runs_last_line_and_stops(pipe, capsys) -> None:
    reader, w = pipe
    stop = asyncio.Event()
    stop_reading = run_console(object(), stop, stream=reader)

    os.write(w, b"/help")
    os.close(w)
    await asyncio.wait_for(stop.wait(), 1.0)
    stop_reading()

    assert "Available commands:" in capsys.readouterr().out


@pytest.mark.asyncio
async def test_stdin_redirected_from_file(tmp_path: Path, capsys) -> None:
    cmds = tmp_path / "cmds.txt"
    cmds.write_text("/help\n/nope\n", encoding="utf-8")
    stop = asyncio.Event()

    with cmds.open("r", encoding="utf-8") as stream:
        stop_reading = run_console(object(), stop, stream=stream)
        await asyncio.wait_for(stop.wait(), 2.0)
        stop_reading()

    out = capsys.readouterr().out
    assert "Available commands:" in out
    assert "Unknown command: /nope" in out


@pytest.mark.parametrize("overlays", [ConsoleOverlays, FakeOverlays])
def test_overlay_show_matches_port_annotations(overlays) -> None:
    port = typing.get_type_hints(OverlayPort.show)
    impl = typing.get_type_hints(overlays.show)
    for name in ("view", "on_close", "on_pointer_press", "on_key"):
        assert impl[name] == port[name]


def test_render_detail_wraps_long_description() -> None:
    view = DetailView(
        title="Buy milk",
        description="word " * 40,
        chip=LabelChip("home", "blue"),
        actions=[],
        x=0,
        y=0,
        width=500,
        height=200,
    )
    box = render_detail(view, width=40)
    assert "[home] Buy milk" in box
    assert box.count("word") == 40
    assert all(len(line) == len(box.splitlines()[0]) for line in box.splitlines())
