# src/planify_today/config.py

"""Centralized settings loaded from environment variables (+ optional .env).

Design goals:
- One Settings object for the whole app.
- Every knob has a sane default so the applet runs with no configuration.
- Settings are injectable (tests build their own instances).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

from dotenv import load_dotenv

ENV_PREFIX = "PLANIFY_TODAY"

PLANIFY_APP_ID = "io.github.alainm23.planify"

DEFAULT_DB_PATH = (
    Path.home() / ".var" / "app" / PLANIFY_APP_ID / "data" / PLANIFY_APP_ID / "database.db"
)
DEFAULT_PLANIFY_CMD = f"flatpak run {PLANIFY_APP_ID}"
DEFAULT_INSTALL_CMD = (
    "gnome-terminal -- bash -c "
    "'sudo apt update && sudo apt install -y sqlite3; echo \"Press Enter to close\"; read'"
)

load_dotenv(override=False)


def _k(suffix: str) -> str:
    """Build env var name with the project prefix."""
    return f"{ENV_PREFIX}_{suffix}"


def _env(name: str, default: str = "") -> str:
    v = os.getenv(name)
    return default if v is None else v


def _first_env(*names: str, default: str | None = None) -> str | None:
    for n in names:
        v = os.getenv(n)
        if v is not None and v.strip() != "":
            return v
    return default


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() in {"1", "true", "yes", "y", "on"}


def _env_int(name: str, default: int, *, minimum: int | None = None) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        return default
    if minimum is not None and value < minimum:
        return minimum
    return value


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        return default


def _env_paths(name: str, default: List[Path]) -> List[Path]:
    """Colon-separated list of paths (like $PATH)."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [Path(p.strip()).expanduser() for p in raw.split(os.pathsep) if p.strip()]


def _env_path(name: str, default: Path) -> Path:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return Path(raw).expanduser()


@dataclass(frozen=True, slots=True)
class Settings:
    # ---- App / logging ----
    app_name: str
    version: str
    log_level: str
    data_dir: Path

    # ---- Database access ----
    sqlite_cmd: str
    db_paths: List[Path]
    query_timeout: float

    # ---- External commands ----
    planify_cmd: str
    open_task_arg: Optional[str]
    install_cmd: str

    # ---- Loops ----
    refresh_interval: int
    notify_enabled: bool
    notify_interval: int
    notify_lookahead_minutes: int

    # ---- Hosts ----
    console_enabled: bool
    desktop_notifications: bool

    @staticmethod
    def from_env() -> "Settings":
        from . import __version__

        app_name = _env(_k("APP_NAME"), "Planify Today")
        log_level = _env(_k("LOG_LEVEL"), "INFO")
        data_dir = _env_path(_k("DATA_DIR"), Path.home() / ".local" / "state" / "planify_today")

        sqlite_cmd = _env(_k("SQLITE_CMD"), "sqlite3")
        db_paths = _env_paths(_k("DB_PATHS"), [DEFAULT_DB_PATH])
        query_timeout = _env_float(_k("QUERY_TIMEOUT"), 10.0)

        planify_cmd = _env(_k("PLANIFY_CMD"), DEFAULT_PLANIFY_CMD)
        # Empty means "never pass the task id to Planify".
        open_task_arg = _first_env(_k("OPEN_TASK_ARG"), default=None)
        install_cmd = _env(_k("INSTALL_CMD"), DEFAULT_INSTALL_CMD)

        refresh_interval = _env_int(_k("REFRESH_INTERVAL"), 60, minimum=1)
        notify_enabled = _env_bool(_k("NOTIFY_ENABLED"), True)
        notify_interval = _env_int(_k("NOTIFY_INTERVAL"), 60, minimum=1)
        notify_lookahead_minutes = _env_int(_k("NOTIFY_LOOKAHEAD_MINUTES"), 5, minimum=0)

        console_enabled = _env_bool(_k("CONSOLE_ENABLED"), True)
        desktop_notifications = _env_bool(_k("DESKTOP_NOTIFICATIONS"), True)

        return Settings(
            app_name=app_name,
            version=__version__,
            log_level=log_level,
            data_dir=data_dir,
            sqlite_cmd=sqlite_cmd,
            db_paths=db_paths,
            query_timeout=query_timeout,
            planify_cmd=planify_cmd,
            open_task_arg=open_task_arg,
            install_cmd=install_cmd,
            refresh_interval=refresh_interval,
            notify_enabled=notify_enabled,
            notify_interval=notify_interval,
            notify_lookahead_minutes=notify_lookahead_minutes,
            console_enabled=console_enabled,
            desktop_notifications=desktop_notifications,
        )


_SETTINGS: Settings | None = None


def get_settings() -> Settings:
    global _SETTINGS
    if _SETTINGS is None:
        _SETTINGS = Settings.from_env()
    return _SETTINGS
