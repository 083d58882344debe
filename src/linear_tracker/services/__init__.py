"""Service layer for business logic."""

from .config_service import ConfigService
from .filter_service import FilterService, TaskFilter
from .readiness import index_tasks, is_task_ready

__all__ = [
    "ConfigService",
    "FilterService",
    "TaskFilter",
    "index_tasks",
    "is_task_ready",
]
