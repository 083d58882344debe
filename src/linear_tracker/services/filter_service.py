"""Service for applying task filters."""

from collections.abc import Sequence
from dataclasses import dataclass, field

from ..models import TaskStatus, UnifiedTask
from .readiness import index_tasks, is_task_ready


def _as_list(value: object) -> list:
    if value is None:
        return []
    if isinstance(value, (str, int)):
        return [value]
    return list(value)  # type: ignore[call-overload]


@dataclass
class TaskFilter:
    """Filter criteria for querying tasks.

    Every criterion is optional. Criteria are ANDed together; a criterion
    given a list matches if the task matches any value in it, except
    ``labels`` where every listed label must be present.

    Scalar values are accepted for ``status``, ``priority`` and ``type`` and
    normalized to lists.
    """

    status: list[TaskStatus] = field(default_factory=list)
    labels: list[str] = field(default_factory=list)  # All must be present
    priority: list[int] = field(default_factory=list)
    parent_id: str | None = None
    assignee: str | None = None
    type: list[str] = field(default_factory=list)
    ready: bool = False
    limit: int | None = None
    offset: int | None = None
    exclude_ids: list[str] = field(default_factory=list)

    def __post_init__(self) -> None:
        self.status = [TaskStatus(s) for s in _as_list(self.status)]
        self.labels = _as_list(self.labels)
        self.priority = _as_list(self.priority)
        self.type = _as_list(self.type)
        self.exclude_ids = _as_list(self.exclude_ids)

        for p in self.priority:
            if not 0 <= p <= 4:
                raise ValueError(f"Priority must be between 0 and 4, got {p}")
        if self.limit is not None and self.limit < 0:
            raise ValueError("limit cannot be negative")
        if self.offset is not None and self.offset < 0:
            raise ValueError("offset cannot be negative")


class FilterService:
    """Service for applying filters to tasks."""

    def apply(
        self,
        tasks: Sequence[UnifiedTask],
        filter_: TaskFilter | None = None,
    ) -> list[UnifiedTask]:
        """Apply a filter to a list of tasks, preserving order.

        Exclusion and readiness narrow the already-matched set, then
        ``offset`` and ``limit`` slice the result. Readiness is evaluated
        against the full, unfiltered ``tasks`` collection.
        """
        if filter_ is None:
            return list(tasks)

        result = [task for task in tasks if self._matches(task, filter_)]

        if filter_.exclude_ids:
            excluded = set(filter_.exclude_ids)
            result = [task for task in result if task.id not in excluded]

        if filter_.ready:
            lookup = index_tasks(tasks)
            result = [task for task in result if is_task_ready(task, lookup)]

        if filter_.offset:
            result = result[filter_.offset :]

        if filter_.limit:
            result = result[: filter_.limit]

        return result

    def _matches(self, task: UnifiedTask, f: TaskFilter) -> bool:
        """Check the per-task criteria."""
        # Status filter (any match)
        if f.status and task.status not in f.status:
            return False

        # Label filter (all required)
        if f.labels and not all(label in task.labels for label in f.labels):
            return False

        # Priority filter (any match)
        if f.priority and task.priority not in f.priority:
            return False

        if f.parent_id and task.parent_id != f.parent_id:
            return False

        if f.assignee and task.assignee != f.assignee:
            return False

        # Type filter (any match)
        return not (f.type and task.type not in f.type)
