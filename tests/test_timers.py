# tests/test_timers.py

from __future__ import annotations

import asyncio

import pytest

from planify_today.connectors.timers import AsyncioTimerSource
from planify_today.core.ports import SOURCE_CONTINUE, SOURCE_REMOVE


@pytest.mark.asyncio
async def test_continue_rearms_until_removed() -> None:
    timers = AsyncioTimerSource()
    calls: list[int] = []

    def tick() -> bool:
        calls.append(1)
        return SOURCE_CONTINUE

    handle = timers.add_seconds(0.01, tick)
    await asyncio.sleep(0.06)
    timers.remove(handle)
    seen = len(calls)
    await asyncio.sleep(0.03)

    assert seen >= 2
    assert len(calls) == seen
    assert handle not in timers.active


@pytest.mark.asyncio
async def test_remove_returns_stop_the_source() -> None:
    timers = AsyncioTimerSource()
    calls: list[int] = []

    def once() -> bool:
        calls.append(1)
        return SOURCE_REMOVE

    handle = timers.add_seconds(0.01, once)
    await asyncio.sleep(0.05)

    assert calls == [1]
    assert handle.cancelled


@pytest.mark.asyncio
async def test_callback_removing_itself_is_not_rescheduled() -> None:
    timers = AsyncioTimerSource()
    calls: list[int] = []
    holder: dict = {}

    def tick() -> bool:
        calls.append(1)
        timers.remove(holder["h"])
        return SOURCE_CONTINUE

    holder["h"] = timers.add_seconds(0.01, tick)
    await asyncio.sleep(0.05)
    assert calls == [1]


@pytest.mark.asyncio
async def test_crashing_callback_keeps_timer(caplog) -> None:
    timers = AsyncioTimerSource()
    calls: list[int] = []

    def flaky() -> bool:
        calls.append(1)
        raise RuntimeError("boom")

    handle = timers.add_seconds(0.01, flaky)
    await asyncio.sleep(0.05)
    timers.remove(handle)

    assert len(calls) >= 2
    assert "Timer callback crashed" in caplog.text
