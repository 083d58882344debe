"""Typed views of Linear GraphQL payloads.

The API returns camelCase JSON with nested connection objects
(``labels { nodes [...] }``). These models validate that shape once at the
transport boundary so the rest of the code works with attributes instead of
nested ``dict.get`` chains.

Optional nested objects (assignee, parent, project, children) are allowed to
be missing or ``null``; the normalizer treats them as absent.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator


class RemoteStateType(str, Enum):
    """Linear's workflow state categories."""

    BACKLOG = "backlog"
    UNSTARTED = "unstarted"
    STARTED = "started"
    COMPLETED = "completed"
    CANCELED = "canceled"


class _LinearModel(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class WorkflowState(_LinearModel):
    """A named, typed stage in a team's workflow."""

    id: str
    name: str
    # Plain string so unknown categories (e.g. "triage") survive validation
    type: str


class Label(_LinearModel):
    id: str | None = None
    name: str


class Viewer(_LinearModel):
    """The authenticated Linear user."""

    id: str
    name: str = ""
    email: str = ""


class ParentRef(_LinearModel):
    id: str
    identifier: str | None = None
    title: str | None = None


class ProjectRef(_LinearModel):
    id: str
    name: str | None = None


class ChildIssue(_LinearModel):
    id: str
    identifier: str | None = None
    title: str | None = None
    state: WorkflowState | None = None


class IssueRecord(_LinearModel):
    """A raw Linear issue prior to normalization."""

    id: str
    identifier: str
    title: str
    description: str | None = None
    priority: int = 0  # 0 = no priority, 1 = urgent ... 4 = low
    state: WorkflowState
    labels: list[Label] = Field(default_factory=list)
    assignee: Viewer | None = None
    parent: ParentRef | None = None
    children: list[ChildIssue] | None = None
    project: ProjectRef | None = None
    created_at: str | None = Field(default=None, alias="createdAt")
    updated_at: str | None = Field(default=None, alias="updatedAt")

    @field_validator("labels", mode="before")
    @classmethod
    def unwrap_labels(cls, v: object) -> object:
        """Accept both ``{"nodes": [...]}`` and a bare list."""
        if v is None:
            return []
        if isinstance(v, dict):
            return v.get("nodes") or []
        return v

    @field_validator("children", mode="before")
    @classmethod
    def unwrap_children(cls, v: object) -> object:
        if isinstance(v, dict):
            return v.get("nodes") or []
        return v

    @field_validator("priority", mode="before")
    @classmethod
    def default_priority(cls, v: object) -> object:
        return 0 if v is None else v

    @property
    def label_names(self) -> list[str]:
        return [label.name for label in self.labels]
