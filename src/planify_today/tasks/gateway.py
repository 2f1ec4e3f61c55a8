# src/planify_today/tasks/gateway.py

from __future__ import annotations

"""
Query gateway: runs SQL against Planify's database through the sqlite3 CLI.

One subprocess per call, no retries. The call blocks the event loop for the
duration of the subprocess; queries and the database are small.
"""

import json
import logging
import shutil
import subprocess
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base class for failures the caller must tell apart."""


class ToolMissing(GatewayError):
    def __init__(self, tool: str) -> None:
        super().__init__(f"{tool} not installed")
        self.tool = tool


class DatabaseMissing(GatewayError):
    def __init__(self, candidates: Sequence[Path]) -> None:
        super().__init__("Database not found")
        self.candidates = list(candidates)


class QueryFailed(GatewayError):
    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


@dataclass(slots=True)
class QueryResult:
    """
    Rows parsed from `sqlite3 -json`.

    parsed=False means stdout was not a JSON array of objects; rows is empty and
    raw_text holds what the tool printed.
    """

    rows: list[dict[str, Any]] = field(default_factory=list)
    raw_text: str | None = None
    parsed: bool = True


def parse_json_output(text: str) -> QueryResult:
    stripped = text.strip()
    if not stripped:
        return QueryResult()

    try:
        data = json.loads(stripped)
    except ValueError:
        logger.warning("sqlite3 output is not JSON; returning raw text (%d chars)", len(stripped))
        return QueryResult(raw_text=stripped, parsed=False)

    if not isinstance(data, list) or not all(isinstance(r, dict) for r in data):
        logger.warning("sqlite3 output is not a JSON array of rows; returning raw text")
        return QueryResult(raw_text=stripped, parsed=False)

    return QueryResult(rows=data)


Runner = Callable[..., "subprocess.CompletedProcess[str]"]


class SqliteCliGateway:
    """
    Executes queries with `<sqlite_cmd> -json <db> <sql>`.

    argv is passed as a list (no shell), so the SQL text never goes through
    shell quoting.
    """

    def __init__(
        self,
        *,
        db_paths: Sequence[str | Path],
        sqlite_cmd: str = "sqlite3",
        timeout: float = 10.0,
        runner: Runner = subprocess.run,
        which: Callable[[str], str | None] = shutil.which,
    ) -> None:
        self.sqlite_cmd = sqlite_cmd
        self.db_paths = [Path(p).expanduser() for p in db_paths]
        self.timeout = timeout
        self._run = runner
        self._which = which

    def tool_available(self) -> bool:
        return self._which(self.sqlite_cmd) is not None

    def find_database(self) -> Path | None:
        for path in self.db_paths:
            if path.exists():
                return path
        return None

    def execute(self, sql: str) -> QueryResult:
        if not self.tool_available():
            raise ToolMissing(self.sqlite_cmd)

        db_path = self.find_database()
        if db_path is None:
            raise DatabaseMissing(self.db_paths)

        argv = [self.sqlite_cmd, "-json", str(db_path), sql]
        logger.debug("Running %s -json %s (%d chars of SQL)", self.sqlite_cmd, db_path, len(sql))

        try:
            proc = self._run(
                argv,
                capture_output=True,
                text=True,
                timeout=self.timeout,
                check=False,
            )
        except FileNotFoundError as e:
            raise ToolMissing(self.sqlite_cmd) from e
        except subprocess.TimeoutExpired as e:
            raise QueryFailed(f"sqlite3 timed out after {self.timeout:g}s") from e
        except OSError as e:
            raise QueryFailed(str(e)) from e

        if proc.returncode != 0:
            message = (proc.stderr or "").strip() or f"sqlite3 exited with status {proc.returncode}"
            raise QueryFailed(message)

        return parse_json_output(proc.stdout or "")
