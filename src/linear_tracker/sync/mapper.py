"""Translation between Linear's state/priority vocabulary and the unified one.

Both directions are total. The reverse status mapping is lossy: ``blocked``
and ``in_progress`` both become ``started`` since Linear has no blocked
category, and ``open`` always becomes ``unstarted`` so a task is never moved
back to the backlog.
"""

from ..models import RemoteStateType, TaskStatus

_REMOTE_TO_UNIFIED: dict[str, TaskStatus] = {
    RemoteStateType.BACKLOG.value: TaskStatus.OPEN,
    RemoteStateType.UNSTARTED.value: TaskStatus.OPEN,
    RemoteStateType.STARTED.value: TaskStatus.IN_PROGRESS,
    RemoteStateType.COMPLETED.value: TaskStatus.COMPLETED,
    RemoteStateType.CANCELED.value: TaskStatus.CANCELLED,
}

_UNIFIED_TO_REMOTE: dict[TaskStatus, RemoteStateType] = {
    TaskStatus.OPEN: RemoteStateType.UNSTARTED,
    TaskStatus.IN_PROGRESS: RemoteStateType.STARTED,
    TaskStatus.BLOCKED: RemoteStateType.STARTED,
    TaskStatus.COMPLETED: RemoteStateType.COMPLETED,
    TaskStatus.CANCELLED: RemoteStateType.CANCELED,
}

# Linear priority 0 means "no priority"
UNSET_REMOTE_PRIORITY = 0
DEFAULT_PRIORITY = 2


def to_unified_status(remote_type: str | RemoteStateType) -> TaskStatus:
    """Map a Linear state type to a unified status. Unknown types are open."""
    key = remote_type.value if isinstance(remote_type, RemoteStateType) else remote_type
    return _REMOTE_TO_UNIFIED.get(key, TaskStatus.OPEN)


def to_remote_type(status: str | TaskStatus) -> RemoteStateType:
    """Map a unified status to the Linear state type used when writing."""
    try:
        return _UNIFIED_TO_REMOTE[TaskStatus(status)]
    except ValueError:
        return RemoteStateType.UNSTARTED


def map_priority(remote_priority: int) -> int:
    """Map Linear priority (0 unset, 1 urgent .. 4 low) to unified 0..4."""
    if remote_priority == UNSET_REMOTE_PRIORITY:
        return DEFAULT_PRIORITY
    return min(4, max(0, remote_priority - 1))
