"""Convert Linear issue records into unified tasks."""

from ..models import (
    TASK_TYPE_EPIC,
    TASK_TYPE_TASK,
    IssueRecord,
    RemoteStateType,
    UnifiedTask,
)
from .mapper import map_priority, to_unified_status

_DONE_CHILD_TYPES = frozenset({RemoteStateType.COMPLETED.value, RemoteStateType.CANCELED.value})


def issue_to_task(issue: IssueRecord) -> UnifiedTask:
    """Normalize a Linear issue into a UnifiedTask.

    Absent nested objects (assignee, parent, project, children) produce
    ``None`` fields or zero counts. Child aggregates are computed from the
    record passed in on every call.
    """
    labels = issue.label_names
    is_epic = any(label.lower() == TASK_TYPE_EPIC for label in labels)
    children = issue.children or []

    return UnifiedTask(
        id=issue.id,
        title=f"{issue.identifier}: {issue.title}",
        status=to_unified_status(issue.state.type),
        priority=map_priority(issue.priority),
        description=issue.description,
        labels=labels,
        type=TASK_TYPE_EPIC if is_epic else TASK_TYPE_TASK,
        parent_id=issue.parent.id if issue.parent else None,
        assignee=issue.assignee.email if issue.assignee else None,
        created_at=issue.created_at,
        updated_at=issue.updated_at,
        metadata={
            "identifier": issue.identifier,
            "state_id": issue.state.id,
            "state_name": issue.state.name,
            "project_id": issue.project.id if issue.project else None,
            "project_name": issue.project.name if issue.project else None,
            "child_count": len(children),
            "completed_child_count": sum(
                1 for child in children if child.state and child.state.type in _DONE_CHILD_TYPES
            ),
        },
    )
