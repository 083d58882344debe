"""Command implementations for the linear-tracker CLI.

Each command takes a constructed engine and returns an exit code
(0 for success, 1 for a reported failure).
"""

import logging

from ..models import CompletionResult, OperationResult, TaskStatus
from ..services.filter_service import TaskFilter
from ..sync.engine import LinearSyncEngine
from .output import error, header, info, success, task_details, task_line

logger = logging.getLogger(__name__)


def _report(result: OperationResult | CompletionResult) -> int:
    if result.success:
        success(result.message)
        return 0
    error(result.message)
    if result.detail:
        info(result.detail)
    return 1


def run_check(engine: LinearSyncEngine) -> int:
    """Verify the API key and show the authenticated user."""
    header("Connecting to Linear...")
    result = engine.connect()
    code = _report(result)
    if code == 0:
        config = engine.config
        info(f"Team: {config.team_id or '(not set)'}")
        info(f"Project: {config.project_id or '(not set)'}")
        info(f"Label: {config.label_name}")
    return code


def run_list(
    engine: LinearSyncEngine,
    statuses: list[str] | None = None,
    labels: list[str] | None = None,
    ready: bool = False,
    limit: int | None = None,
) -> int:
    """List tracked tasks matching the given criteria."""
    try:
        filter_ = TaskFilter(
            status=[TaskStatus(s) for s in statuses or []],
            labels=labels or [],
            ready=ready,
            limit=limit,
        )
    except ValueError as e:
        error(str(e))
        return 1

    tasks = engine.get_tasks(filter_)
    if not tasks:
        info("No tasks found")
        return 0
    for task in tasks:
        print(task_line(task))
    return 0


def run_next(engine: LinearSyncEngine) -> int:
    """Show the task that should be worked on next."""
    task = engine.get_next_task()
    if task is None:
        info("No ready tasks")
        return 0
    task_details(task)
    return 0


def run_show(engine: LinearSyncEngine, task_id: str) -> int:
    """Show one task."""
    task = engine.get_task(task_id)
    if task is None:
        error(f"Task not found: {task_id}")
        return 1
    task_details(task)
    return 0


def run_sync(engine: LinearSyncEngine) -> int:
    """Fetch all tracked tasks and report what changed."""
    header("Syncing from Linear...")
    result = engine.sync()
    if not result.success:
        error(result.message)
        if result.detail:
            info(result.detail)
        return 1

    success(result.message)
    info(f"Added: {result.added}")
    info(f"Updated: {result.updated}")
    if result.removed:
        info(f"Removed: {result.removed}")
    return 0


def run_claim(engine: LinearSyncEngine, task_id: str) -> int:
    """Assign a task to yourself and start it."""
    return _report(engine.claim_task(task_id))


def run_complete(engine: LinearSyncEngine, task_id: str, reason: str | None = None) -> int:
    """Mark a task completed, with an optional note."""
    return _report(engine.complete_task(task_id, reason))


def run_status(engine: LinearSyncEngine, task_id: str, status: str) -> int:
    """Move a task to the workflow state for a unified status."""
    return _report(engine.update_task_status(task_id, status))


def run_epics(engine: LinearSyncEngine) -> int:
    """List the project's epics with child progress."""
    epics = engine.get_epics()
    if not epics:
        info("No epics found")
        return 0
    for epic in epics:
        done = epic.metadata.get("completed_child_count", 0)
        total = epic.metadata.get("child_count", 0)
        print(f"{task_line(epic)}  [{done}/{total}]")

    context = engine.get_epic_context()
    if context is not None:
        print()
        header(f"Active epic: {context.name}")
        info(f"{context.completed_count}/{context.total_count} tasks done")
    return 0
