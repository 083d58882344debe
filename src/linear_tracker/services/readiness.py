"""Dependency readiness checks."""

from collections.abc import Iterable, Mapping

from ..models import UnifiedTask


def index_tasks(tasks: Iterable[UnifiedTask]) -> dict[str, UnifiedTask]:
    """Build an id -> task lookup."""
    return {task.id: task for task in tasks}


def is_task_ready(
    task: UnifiedTask,
    all_tasks: Iterable[UnifiedTask] | Mapping[str, UnifiedTask],
) -> bool:
    """Check whether every dependency of ``task`` is resolved.

    A dependency is resolved when it is completed or cancelled, or when it
    is missing from ``all_tasks`` altogether. A deleted or out-of-scope
    dependency must not block its dependents forever.
    """
    if not task.depends_on:
        return True

    lookup = all_tasks if isinstance(all_tasks, Mapping) else index_tasks(all_tasks)
    for dep_id in task.depends_on:
        dep = lookup.get(dep_id)
        if dep is not None and not dep.is_terminal:
            return False
    return True
