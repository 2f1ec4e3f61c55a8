# src/planify_today/tasks/task_actions.py

from __future__ import annotations

import logging
import shlex

from ..core.state import ExtensionContext
from .gateway import GatewayError
from .queries import InvalidTaskId, mark_done_query, validate_task_id

logger = logging.getLogger(__name__)


def mark_task_done(ctx: ExtensionContext, task_id: str | None, *, title: str | None = None) -> bool:
    """
    Set checked = 1 for one task, then re-run the Task Sync cycle.
    Returns False (after logging) when the id is invalid or the update fails.
    """
    if not task_id:
        logger.warning("mark_task_done called without a task id")
        return False

    try:
        sql = mark_done_query(task_id)
    except InvalidTaskId:
        logger.warning("Refusing to update task with invalid id %r", task_id)
        return False

    try:
        ctx.gateway.execute(sql)
    except GatewayError as e:
        logger.error("Error updating task %s: %s", task_id, e)
        return False

    logger.info("Task marked as done: %s", title or task_id)
    ctx.refresh()
    return True


def planify_command(ctx: ExtensionContext, task_id: str | None = None) -> str:
    cmd = str(ctx.settings.planify_cmd)
    arg = getattr(ctx.settings, "open_task_arg", None)
    if not (arg and task_id):
        return cmd
    try:
        tid = validate_task_id(task_id)
    except InvalidTaskId:
        logger.warning("Not passing invalid task id %r to Planify", task_id)
        return cmd
    return f"{cmd} {shlex.quote(arg)} {shlex.quote(tid)}"


def open_planify(ctx: ExtensionContext, task_id: str | None = None) -> None:
    cmd = planify_command(ctx, task_id)
    logger.info("Opening Planify: %s", cmd)
    try:
        ctx.launcher.spawn(cmd)
    except OSError:
        logger.exception("Failed to launch Planify")


def install_sqlite(ctx: ExtensionContext) -> None:
    cmd = str(ctx.settings.install_cmd)
    logger.info("Launching sqlite3 installer: %s", cmd)
    try:
        ctx.launcher.spawn(cmd)
    except OSError:
        logger.exception("Failed to launch sqlite3 installer")
