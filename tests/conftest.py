# tests/conftest.py

from __future__ import annotations

from pathlib import Path
from types import SimpleNamespace

import pytest

from planify_today.core.state import ExtensionContext

from .fakes import FakeGateway, FakeLauncher, FakeMenu, FakeNotifier, FakeOverlays, FakeTimers


@pytest.fixture()
def settings(tmp_path: Path) -> SimpleNamespace:
    """
    Minimal settings object compatible with ExtensionContext and the loops.

    We intentionally use a SimpleNamespace rather than importing real config,
    to keep unit tests isolated and deterministic.
    """
    return SimpleNamespace(
        app_name="Planify Today",
        version="0.0-test",
        log_level="DEBUG",
        data_dir=tmp_path,
        sqlite_cmd="sqlite3",
        db_paths=[tmp_path / "database.db"],
        query_timeout=5.0,
        planify_cmd="flatpak run io.github.alainm23.planify",
        open_task_arg=None,
        install_cmd="gnome-terminal -- apt install sqlite3",
        refresh_interval=60,
        notify_enabled=True,
        notify_interval=60,
        notify_lookahead_minutes=5,
        console_enabled=False,
        desktop_notifications=False,
    )


@pytest.fixture()
def gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture()
def ctx(settings: SimpleNamespace, gateway: FakeGateway) -> ExtensionContext:
    """ExtensionContext wired with deterministic fakes."""
    return ExtensionContext(
        settings=settings,
        gateway=gateway,  # type: ignore[arg-type]
        menu=FakeMenu(),
        overlays=FakeOverlays(),
        timers=FakeTimers(),
        notifier=FakeNotifier(),
        launcher=FakeLauncher(),
    )

