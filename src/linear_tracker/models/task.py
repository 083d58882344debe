"""Unified task domain model."""

from enum import Enum
from typing import Any

from pydantic import BaseModel, Field


class TaskStatus(str, Enum):
    """Status of a task in the unified vocabulary."""

    OPEN = "open"
    IN_PROGRESS = "in_progress"
    BLOCKED = "blocked"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


# Statuses that satisfy a dependency and count toward "done"
TERMINAL_STATUSES = frozenset({TaskStatus.COMPLETED, TaskStatus.CANCELLED})

TASK_TYPE_EPIC = "epic"
TASK_TYPE_TASK = "task"


class UnifiedTask(BaseModel):
    """Canonical task representation consumed by the scheduler."""

    id: str  # Remote record id, not the human-readable identifier
    title: str  # "<identifier>: <remote title>"
    status: TaskStatus = TaskStatus.OPEN
    priority: int = Field(default=2, ge=0, le=4)  # 0 = highest, 4 = backlog
    description: str | None = None
    labels: list[str] = Field(default_factory=list)
    type: str = TASK_TYPE_TASK
    parent_id: str | None = None
    depends_on: list[str] | None = None
    blocks: list[str] | None = None
    assignee: str | None = None
    created_at: str | None = None  # ISO-8601, as reported by the remote
    updated_at: str | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)

    @property
    def identifier(self) -> str | None:
        """Human-readable remote code (e.g. "ENG-42")."""
        return self.metadata.get("identifier")

    @property
    def is_terminal(self) -> bool:
        """Whether the task is completed or cancelled."""
        return self.status in TERMINAL_STATUSES

    @property
    def is_epic(self) -> bool:
        return self.type == TASK_TYPE_EPIC
