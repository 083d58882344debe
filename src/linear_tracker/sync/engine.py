"""Linear sync engine for task reconciliation.

This module provides the LinearSyncEngine class which handles:
- Fetching labelled issues and normalizing them into unified tasks
- Serving filtered queries and next-task selection from a local cache
- Claiming, completing and re-stating tasks on Linear
- Full syncs that record a reconciliation baseline per task
- Conflict detection against that baseline and resolution policies

Every public operation catches transport failures at its own boundary and
returns a result object, an empty collection or None. Nothing is persisted;
the cache and baselines are rebuilt from Linear on each start.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import replace
from typing import TYPE_CHECKING

from pydantic import ValidationError

from ..linear.client import (
    LinearClient,
    LinearClientError,
    LinearMutationError,
    LinearNotFoundError,
)
from ..models import (
    WATCHED_FIELDS,
    CompletionResult,
    ConflictRecord,
    ConflictResolution,
    EpicContext,
    ErrorKind,
    OperationResult,
    RemoteStateType,
    SyncResult,
    TaskStatus,
    TrackerConfig,
    UnifiedTask,
    Viewer,
)
from ..services.config_service import ConfigService
from ..services.filter_service import FilterService, TaskFilter
from ..services.readiness import is_task_ready
from ..utils import now_iso
from .cache import TaskCache
from .mapper import to_remote_type
from .normalizer import issue_to_task
from .workflow import WorkflowStateResolver

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)

# Failures from the transport or from payloads that do not validate
RemoteError = (LinearClientError, ValidationError)

NOT_INITIALIZED = "Linear client not initialized"
RESOLUTIONS = ("local", "remote", "merge")


def _error_kind(exc: Exception) -> ErrorKind:
    """Classify an exception raised by the transport."""
    if isinstance(exc, LinearMutationError):
        return ErrorKind.MUTATION_REJECTED
    if isinstance(exc, LinearNotFoundError):
        return ErrorKind.NOT_FOUND
    return ErrorKind.TRANSPORT


class LinearSyncEngine:
    """Engine reconciling a local task cache with Linear.

    One instance owns its cache, baselines and workflow-state memo; build a
    separate instance per session/configuration.

    Mutations on the same task id are serialized with a per-id lock, so a
    multi-threaded host cannot interleave a claim with a completion.
    """

    def __init__(
        self,
        config: TrackerConfig,
        client: LinearClient | None = None,
        *,
        owns_client: bool = False,
    ) -> None:
        """Initialize the sync engine.

        Args:
            config: Tracker configuration (team, project, label)
            client: Linear client; None leaves the engine not ready
            owns_client: Close the client on dispose()
        """
        self.config = config
        self._client = client
        self._owns_client = owns_client

        self._cache = TaskCache()
        self._workflow = WorkflowStateResolver(client) if client is not None else None
        self._filter_service = FilterService()

        self._viewer: Viewer | None = None
        self._ready = False
        self._epic_id = config.epic_id

        self._locks: dict[str, threading.RLock] = {}
        self._locks_guard = threading.Lock()

    @classmethod
    def from_settings(
        cls,
        settings: Settings,
        config_service: ConfigService | None = None,
    ) -> LinearSyncEngine:
        """Build an engine from settings and linear-tracker.yml.

        Without an API key the engine is created with no client: queries
        return empty results and mutations report failure.
        """
        if config_service is None:
            config_service = ConfigService(settings.project_root)
        config = config_service.resolve(settings)

        client = None
        if settings.api_key:
            client = LinearClient(
                settings.api_key,
                settings.api_url,
                timeout=settings.timeout,
                page_size=settings.page_size,
            )
        else:
            logger.warning("No Linear API key configured (set LINEAR_API_KEY)")

        return cls(config, client, owns_client=True)

    # --- Lifecycle ---

    @property
    def ready(self) -> bool:
        """Whether connect() succeeded and dispose() has not been called."""
        return self._ready

    @property
    def viewer(self) -> Viewer | None:
        return self._viewer

    @property
    def cache(self) -> TaskCache:
        return self._cache

    def connect(self) -> OperationResult:
        """Verify credentials and remember the viewer used for claiming."""
        if self._client is None:
            self._ready = False
            return OperationResult(False, NOT_INITIALIZED, error=ErrorKind.NOT_READY)

        try:
            self._viewer = self._client.get_viewer()
        except RemoteError as e:
            self._ready = False
            logger.warning("Failed to connect to Linear: %s", e)
            return OperationResult(
                False, "Failed to connect to Linear", error=_error_kind(e), detail=str(e)
            )

        self._ready = True
        logger.info("Connected to Linear as %s", self._viewer.email or self._viewer.id)
        return OperationResult(True, f"Connected to Linear as {self._viewer.name}")

    def is_ready(self) -> bool:
        """Probe the API to check the connection is usable right now."""
        if self._client is None:
            return False
        try:
            self._client.get_viewer()
        except RemoteError as e:
            logger.debug("Readiness probe failed: %s", e)
            return False
        return True

    def dispose(self) -> None:
        """Clear cache, baselines and workflow states; mark not ready."""
        self._ready = False
        self._cache.clear()
        if self._workflow is not None:
            self._workflow.clear()
            self._workflow = None
        if self._client is not None and self._owns_client:
            self._client.close()
        self._client = None
        self._viewer = None
        with self._locks_guard:
            self._locks.clear()
        logger.debug("Engine disposed")

    # --- Queries ---

    def get_tasks(self, filter_: TaskFilter | None = None) -> list[UnifiedTask]:
        """Fetch all labelled tasks, refresh the cache and apply ``filter_``."""
        if self._client is None or not self.config.project_id:
            return []

        try:
            tasks = self._fetch_all(self._client)
        except RemoteError as e:
            logger.warning("Failed to fetch tasks from Linear: %s", e)
            return []

        # Overwrite every returned id; absent ids stay unless pruning
        self._cache.put_all(tasks)
        if self.config.prune_stale:
            self._cache.prune(task.id for task in tasks)

        return self._filter_service.apply(tasks, filter_)

    def get_task(self, task_id: str) -> UnifiedTask | None:
        """Get a task from the cache, falling back to a remote fetch.

        A fetched task is cached but gets no baseline.
        """
        cached = self._cache.get(task_id)
        if cached is not None:
            return cached

        if self._client is None:
            return None

        try:
            task = issue_to_task(self._client.get_issue(task_id))
        except LinearNotFoundError:
            logger.debug("Task not found on Linear: %s", task_id)
            return None
        except RemoteError as e:
            logger.warning("Failed to fetch task %s: %s", task_id, e)
            return None

        self._cache.put(task)
        return task

    def get_next_task(self, filter_: TaskFilter | None = None) -> UnifiedTask | None:
        """Pick the next task to work on.

        Only open or in-progress ready tasks are considered. Work already in
        progress wins over any open task; otherwise the most urgent
        (lowest priority number) task is returned.
        """
        base = filter_ if filter_ is not None else TaskFilter()
        candidates = self.get_tasks(
            replace(base, status=[TaskStatus.OPEN, TaskStatus.IN_PROGRESS], ready=True)
        )
        if not candidates:
            return None

        candidates.sort(key=lambda t: t.priority)

        # In-progress work is never pre-empted

        for task in candidates:
            if task.status == TaskStatus.IN_PROGRESS:
                return task
        return candidates[0]

    def is_task_ready(self, task_id: str) -> bool:
        """Check whether a task's dependencies are all resolved."""
        task = self.get_task(task_id)
        if task is None:
            return False
        return is_task_ready(task, self.get_tasks())

    def is_complete(self, filter_: TaskFilter | None = None) -> bool:
        """True if every task matching ``filter_`` is completed or cancelled."""
        return all(task.is_terminal for task in self.get_tasks(filter_))

    def get_epics(self) -> list[UnifiedTask]:
        """Fetch the project's epics. Epics are not written to the cache."""
        if self._client is None or not self.config.project_id:
            return []

        try:
            issues = self._client.get_epics(self.config.project_id)
            return [issue_to_task(issue) for issue in issues]
        except RemoteError as e:
            logger.warning("Failed to fetch epics from Linear: %s", e)
            return []

    # --- Epic context ---

    def set_epic_id(self, epic_id: str) -> None:
        self._epic_id = epic_id

    def get_epic_id(self) -> str:
        return self._epic_id

    def get_epic_context(self) -> EpicContext | None:
        """Describe the active epic and the progress of its child tasks."""
        if not self._epic_id or self._client is None:
            return None

        try:
            epic = self._client.get_issue(self._epic_id)
        except RemoteError as e:
            logger.warning("Failed to fetch epic %s: %s", self._epic_id, e)
            return None

        children = self.get_tasks(TaskFilter(parent_id=epic.id))
        return EpicContext(
            name=epic.title,
            description=epic.description,
            content=epic.description or "",
            completed_count=sum(1 for task in children if task.is_terminal),
            total_count=len(children),
        )

    # --- Mutations ---

    def claim_task(self, task_id: str) -> OperationResult:
        """Assign a task to the viewer and move it to a started state.

        Both changes go out in one mutation. The result is recorded as the
        task's new baseline.
        """
        if self._client is None:
            return OperationResult(False, NOT_INITIALIZED, error=ErrorKind.NOT_READY)

        with self._task_lock(task_id):
            try:
                viewer = self._ensure_viewer(self._client)
                state_id = self._find_state(RemoteStateType.STARTED)
                if state_id is None:
                    return self._missing_state(RemoteStateType.STARTED)

                updated = self._client.update_issue(
                    task_id, assignee_id=viewer.id, state_id=state_id
                )
                task = issue_to_task(updated)
            except RemoteError as e:
                logger.warning("Failed to claim task %s: %s", task_id, e)
                return OperationResult(
                    False,
                    f"Failed to claim task {task_id}",
                    error=_error_kind(e),
                    detail=str(e),
                )

            self._cache.store_synced(task, updated.updated_at)
            logger.info("Claimed %s", updated.identifier)
            return OperationResult(True, f"Task {updated.identifier} claimed", task)

    def complete_task(self, task_id: str, reason: str | None = None) -> CompletionResult:
        """Move a task to the completed state, optionally adding a note.

        The completed version also becomes the task's baseline, so a later
        remote edit is reported by detect_conflict().
        """
        if self._client is None:
            return CompletionResult(False, NOT_INITIALIZED, error=ErrorKind.NOT_READY)

        with self._task_lock(task_id):
            try:
                state_id = self._find_state(RemoteStateType.COMPLETED)
                if state_id is None:
                    return CompletionResult(
                        False,
                        "Could not find completed state",
                        error=ErrorKind.WORKFLOW_STATE_MISSING,
                        detail="No completed state found in team workflow",
                    )
                updated = self._client.update_issue(task_id, state_id=state_id)
                task = issue_to_task(updated)
            except RemoteError as e:
                logger.warning("Failed to complete task %s: %s", task_id, e)
                return CompletionResult(
                    False,
                    f"Failed to complete task {task_id}",
                    error=_error_kind(e),
                    detail=str(e),
                )

            # Completed version becomes the baseline
            self._cache.store_synced(task, updated.updated_at)

            if reason:
                try:
                    self._client.add_comment(task_id, f"Task completed: {reason}")
                except RemoteError as e:
                    logger.warning("Completed %s but could not add note: %s", task_id, e)
                    return CompletionResult(
                        False,
                        f"Task {updated.identifier} marked as complete but the note was not added",
                        task=task,
                        error=_error_kind(e),
                        detail=str(e),
                    )

            logger.info("Completed %s", updated.identifier)
            return CompletionResult(True, f"Task {updated.identifier} marked as complete", task)

    def update_task_status(self, task_id: str, status: TaskStatus | str) -> OperationResult:
        """Move a task to the workflow state matching a unified status.

        Only the cache is refreshed; the baseline is left untouched.
        """
        if self._client is None:
            return OperationResult(False, NOT_INITIALIZED, error=ErrorKind.NOT_READY)

        try:
            target = to_remote_type(TaskStatus(status))
        except ValueError:
            return OperationResult(
                False, f"Unknown status: {status}", error=ErrorKind.INVALID_REQUEST
            )

        with self._task_lock(task_id):
            try:
                state_id = self._find_state(target)
                if state_id is None:
                    return self._missing_state(target)
                updated = self._client.update_issue(task_id, state_id=state_id)
                task = issue_to_task(updated)
            except RemoteError as e:
                logger.warning("Failed to update task %s status: %s", task_id, e)
                return OperationResult(
                    False,
                    f"Failed to update task {task_id}",
                    error=_error_kind(e),
                    detail=str(e),
                )

            self._cache.put(task)
            logger.info("Moved %s to %s", updated.identifier, updated.state.name)
            return OperationResult(
                True, f"Task {updated.identifier} moved to {updated.state.name}", task
            )

    # --- Sync and conflicts ---

    def sync(self) -> SyncResult:
        """Fetch every labelled task and record a fresh baseline for each.

        Added/updated counts compare against the cache before the fetch and
        are informational only; every fetched task is written regardless.
        """
        if self._client is None or not self.config.project_id:
            return SyncResult(
                False,
                NOT_INITIALIZED,
                synced_at=now_iso(),
                error=ErrorKind.NOT_READY,
                detail="Client not ready" if self._client is None else "No project configured",
            )

        try:
            issues = self._client.get_issues_by_label(
                self.config.project_id, self.config.label_name
            )
            tasks = [issue_to_task(issue) for issue in issues]
        except RemoteError as e:
            logger.error("Sync failed: %s", e)
            return SyncResult(
                False,
                "Failed to sync with Linear",
                synced_at=now_iso(),
                error=_error_kind(e),
                detail=str(e),
            )

        # Classify against the cache before overwriting; counts are informational
        added = 0
        updated = 0
        for issue, task in zip(issues, tasks, strict=True):
            cached = self._cache.get(task.id)
            if cached is None:
                added += 1
            elif cached.updated_at != task.updated_at:
                updated += 1
            self._cache.store_synced(task, issue.updated_at)

        # Stale ids survive unless pruning is enabled
        removed = 0
        if self.config.prune_stale:
            removed = len(self._cache.prune(task.id for task in tasks))

        logger.info(
            "Synced %d tasks (added=%d, updated=%d, removed=%d)",
            len(tasks),
            added,
            updated,
            removed,
        )
        return SyncResult(
            True,
            f"Synced {len(tasks)} tasks from Linear",
            synced_at=now_iso(),
            added=added,
            updated=updated,
            removed=removed,
        )

    def detect_conflict(self, task_id: str) -> ConflictRecord | None:
        """Compare a task's baseline against a fresh remote fetch.

        Returns None when there is no baseline, when the remote timestamp is
        unchanged, when only unwatched fields changed, or when the fetch
        fails.
        """
        if self._client is None:
            return None
        try:
            return self._find_conflict(self._client, task_id)
        except RemoteError as e:
            logger.warning("Conflict check failed for %s: %s", task_id, e)
            return None

    def resolve_conflict(self, task_id: str, resolution: ConflictResolution) -> OperationResult:
        """Resolve a detected conflict.

        - "remote": accept the remote version as cache and baseline
        - "merge": same as "remote"; no field-level merge is computed
        - "local": push the baseline's status and description back to
          Linear and re-baseline on the response

        Without a conflict this is a plain get_task().
        """
        if self._client is None:
            return OperationResult(False, NOT_INITIALIZED, error=ErrorKind.NOT_READY)
        if resolution not in RESOLUTIONS:
            return OperationResult(
                False,
                f"Unknown resolution: {resolution}",
                error=ErrorKind.INVALID_REQUEST,
            )

        with self._task_lock(task_id):
            try:
                conflict = self._find_conflict(self._client, task_id)
            except RemoteError as e:
                logger.warning("Conflict check failed for %s: %s", task_id, e)
                return OperationResult(
                    False,
                    f"Failed to check task {task_id} for conflicts",
                    error=_error_kind(e),
                    detail=str(e),
                )

            if conflict is None:
                task = self.get_task(task_id)
                if task is None:
                    return OperationResult(
                        False, f"Task {task_id} not found", error=ErrorKind.NOT_FOUND
                    )
                return OperationResult(True, f"No conflict for task {task_id}", task)

            # Remote and merge both adopt the fetched version
            if resolution != "local":
                self._cache.store_synced(conflict.remote_version, conflict.remote_updated_at)
                logger.info("Resolved %s with remote version", task_id)
                return OperationResult(
                    True, f"Accepted remote version of task {task_id}", conflict.remote_version
                )

            # Push the baseline status and description back
            local = conflict.local_version
            target = to_remote_type(local.status)
            try:
                state_id = self._find_state(target)
                if state_id is None:
                    return self._missing_state(target)
                updated = self._client.update_issue(
                    task_id, state_id=state_id, description=local.description
                )
                task = issue_to_task(updated)
            except RemoteError as e:
                logger.warning("Failed to push local version of %s: %s", task_id, e)
                return OperationResult(
                    False,
                    f"Failed to push local version of task {task_id}",
                    error=_error_kind(e),
                    detail=str(e),
                )

            self._cache.store_synced(task, updated.updated_at)
            logger.info("Resolved %s with local version", task_id)
            return OperationResult(True, f"Pushed local version of task {task_id}", task)

    # --- Internal ---

    def _fetch_all(self, client: LinearClient) -> list[UnifiedTask]:
        issues = client.get_issues_by_label(self.config.project_id, self.config.label_name)
        return [issue_to_task(issue) for issue in issues]

    def _find_conflict(self, client: LinearClient, task_id: str) -> ConflictRecord | None:
        """Conflict check that lets transport errors propagate."""
        baseline = self._cache.get_baseline(task_id)
        if baseline is None:
            return None

        remote_issue = client.get_issue(task_id)
        if remote_issue.updated_at == baseline.updated_at:
            return None

        remote = issue_to_task(remote_issue)
        changed = [
            name
            for name in WATCHED_FIELDS
            if getattr(baseline.task, name) != getattr(remote, name)
        ]
        if not changed:
            logger.debug("Remote touch without watched changes: %s", task_id)
            return None

        logger.info("Conflict on %s: %s", task_id, ", ".join(changed))
        return ConflictRecord(
            task_id=task_id,
            local_version=baseline.task,
            remote_version=remote,
            local_updated_at=baseline.updated_at,
            remote_updated_at=remote_issue.updated_at,
            changed_fields=changed,
        )

    def _ensure_viewer(self, client: LinearClient) -> Viewer:
        if self._viewer is None:
            self._viewer = client.get_viewer()
        return self._viewer

    def _find_state(self, target: RemoteStateType) -> str | None:
        if self._workflow is None:
            return None
        return self._workflow.find_state_by_type(self.config.team_id, target)

    def _missing_state(self, target: RemoteStateType) -> OperationResult:
        return OperationResult(
            False,
            f"Could not find {target.value} state",
            error=ErrorKind.WORKFLOW_STATE_MISSING,
            detail=f"No {target.value} state found in team workflow",
        )

    @contextmanager
    def _task_lock(self, task_id: str) -> Iterator[None]:
        with self._locks_guard:
            lock = self._locks.setdefault(task_id, threading.RLock())
        with lock:
            yield
