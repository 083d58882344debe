"""Data models."""

from .linear import (
    ChildIssue,
    IssueRecord,
    Label,
    ParentRef,
    ProjectRef,
    RemoteStateType,
    Viewer,
    WorkflowState,
)
from .sync import (
    WATCHED_FIELDS,
    CompletionResult,
    ConflictRecord,
    ConflictResolution,
    EpicContext,
    ErrorKind,
    OperationResult,
    SyncBaseline,
    SyncResult,
)
from .task import (
    TASK_TYPE_EPIC,
    TASK_TYPE_TASK,
    TERMINAL_STATUSES,
    TaskStatus,
    UnifiedTask,
)
from .tracker_config import DEFAULT_LABEL_NAME, TrackerConfig

__all__ = [
    "DEFAULT_LABEL_NAME",
    "TASK_TYPE_EPIC",
    "TASK_TYPE_TASK",
    "TERMINAL_STATUSES",
    "WATCHED_FIELDS",
    "ChildIssue",
    "CompletionResult",
    "ConflictRecord",
    "ConflictResolution",
    "EpicContext",
    "ErrorKind",
    "IssueRecord",
    "Label",
    "OperationResult",
    "ParentRef",
    "ProjectRef",
    "RemoteStateType",
    "SyncBaseline",
    "SyncResult",
    "TaskStatus",
    "TrackerConfig",
    "UnifiedTask",
    "Viewer",
    "WorkflowState",
]
