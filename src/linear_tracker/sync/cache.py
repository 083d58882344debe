"""In-memory task cache and reconciliation baselines."""

from __future__ import annotations

import logging
from collections.abc import Iterable

from ..models import SyncBaseline, UnifiedTask

logger = logging.getLogger(__name__)


class TaskCache:
    """Keyed store of normalized tasks plus last-synchronized baselines.

    Entries are replaced wholesale on every write; there is no TTL or field
    merging. Baselines live in a separate map so that a pure read can
    populate the cache without establishing a reconciliation point.
    Nothing here is persisted; ``clear()`` is the only eviction.
    """

    def __init__(self) -> None:
        self._tasks: dict[str, UnifiedTask] = {}
        self._baselines: dict[str, SyncBaseline] = {}

    def __len__(self) -> int:
        return len(self._tasks)

    def __contains__(self, task_id: object) -> bool:
        return task_id in self._tasks

    # --- Tasks ---

    def get(self, task_id: str) -> UnifiedTask | None:
        return self._tasks.get(task_id)

    def put(self, task: UnifiedTask) -> None:
        self._tasks[task.id] = task

    def put_all(self, tasks: Iterable[UnifiedTask]) -> None:
        for task in tasks:
            self._tasks[task.id] = task

    def all(self) -> list[UnifiedTask]:
        return list(self._tasks.values())

    def ids(self) -> set[str]:
        return set(self._tasks)

    # --- Baselines ---

    def get_baseline(self, task_id: str) -> SyncBaseline | None:
        return self._baselines.get(task_id)

    def set_baseline(self, task: UnifiedTask, updated_at: str | None = None) -> None:
        """Record ``task`` as the last observed remote version.

        ``updated_at`` defaults to the task's own timestamp.
        """
        stamp = updated_at if updated_at is not None else task.updated_at
        self._baselines[task.id] = SyncBaseline(task=task, updated_at=stamp)

    def has_baseline(self, task_id: str) -> bool:
        return task_id in self._baselines

    def store_synced(self, task: UnifiedTask, updated_at: str | None = None) -> None:
        """Write the cache entry and the baseline together."""
        self.put(task)
        self.set_baseline(task, updated_at)

    # --- Lifecycle ---

    def prune(self, keep_ids: Iterable[str]) -> list[str]:
        """Remove tasks and baselines whose id is not in ``keep_ids``.

        Returns:
            The removed ids.
        """
        keep = set(keep_ids)
        removed = [task_id for task_id in self._tasks if task_id not in keep]
        for task_id in removed:
            del self._tasks[task_id]
            self._baselines.pop(task_id, None)
        if removed:
            logger.debug("Pruned %d stale cache entries", len(removed))
        return removed

    def clear(self) -> None:
        self._tasks.clear()
        self._baselines.clear()
