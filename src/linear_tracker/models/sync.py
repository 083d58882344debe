"""Result and reconciliation models for the sync engine."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from .task import UnifiedTask

ConflictResolution = Literal["local", "remote", "merge"]

# Fields compared between baseline and remote during conflict detection
WATCHED_FIELDS = ("status", "title", "description", "assignee")


class ErrorKind(str, Enum):
    """Machine-usable failure categories reported in result objects."""

    NOT_READY = "not_ready"
    NOT_FOUND = "not_found"
    WORKFLOW_STATE_MISSING = "workflow_state_missing"
    MUTATION_REJECTED = "mutation_rejected"
    TRANSPORT = "transport"
    INVALID_REQUEST = "invalid_request"


@dataclass
class OperationResult:
    """Result of a single-task mutation (claim, status update, resolve)."""

    success: bool
    message: str
    task: UnifiedTask | None = None
    error: ErrorKind | None = None
    detail: str | None = None  # Underlying error message, verbatim


@dataclass
class CompletionResult:
    """Result of completing a task."""

    success: bool
    message: str
    task: UnifiedTask | None = None
    error: ErrorKind | None = None
    detail: str | None = None


@dataclass
class SyncResult:
    """Result of a full sync with the remote."""

    success: bool
    message: str
    synced_at: str
    added: int = 0
    updated: int = 0
    removed: int = 0
    error: ErrorKind | None = None
    detail: str | None = None


@dataclass
class SyncBaseline:
    """Last observed remote version of a task, used to detect divergence."""

    task: UnifiedTask
    updated_at: str | None


@dataclass
class ConflictRecord:
    """A detected divergence between the baseline and the remote."""

    task_id: str
    local_version: UnifiedTask
    remote_version: UnifiedTask
    local_updated_at: str | None
    remote_updated_at: str | None
    changed_fields: list[str] = field(default_factory=list)


@dataclass
class EpicContext:
    """Summary of the active epic and its child task progress."""

    name: str
    content: str
    completed_count: int
    total_count: int
    description: str | None = None
