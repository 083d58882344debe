"""Configuration model for linear-tracker.yml."""

from pydantic import BaseModel, Field, field_validator

DEFAULT_LABEL_NAME = "ralph-tui"


class TrackerConfig(BaseModel):
    """Root configuration from linear-tracker.yml."""

    version: int = 1
    team_id: str = Field(default="", description="Linear team id for workflow state lookup")
    project_id: str = Field(default="", description="Linear project id to fetch tasks from")
    label_name: str = Field(default=DEFAULT_LABEL_NAME, description="Label selecting tasks")
    epic_id: str = Field(default="", description="Active epic id (optional)")
    prune_stale: bool = Field(
        default=False,
        description="Drop cached tasks that a full fetch no longer returns",
    )

    @field_validator("label_name")
    @classmethod
    def validate_label_name(cls, v: str) -> str:
        """Validate the label name is not blank."""
        v = v.strip()
        if not v:
            raise ValueError("label_name cannot be empty")
        return v

    @field_validator("team_id", "project_id", "epic_id")
    @classmethod
    def strip_ids(cls, v: str) -> str:
        return v.strip()

    @classmethod
    def default(cls) -> "TrackerConfig":
        """Return default configuration."""
        return cls()
