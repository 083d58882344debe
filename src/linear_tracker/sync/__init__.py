"""Linear task synchronization package."""

from .cache import TaskCache
from .engine import LinearSyncEngine
from .mapper import map_priority, to_remote_type, to_unified_status
from .normalizer import issue_to_task
from .workflow import WorkflowStateResolver

__all__ = [
    "LinearSyncEngine",
    "TaskCache",
    "WorkflowStateResolver",
    "issue_to_task",
    "map_priority",
    "to_remote_type",
    "to_unified_status",
]
