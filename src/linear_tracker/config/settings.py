"""Application settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings

from ..linear import DEFAULT_API_URL


class Settings(BaseSettings):
    """Application settings.

    Read from ``LINEAR_*`` environment variables. Tracker values left unset
    here fall back to ``linear-tracker.yml`` and then to built-in defaults.
    """

    api_key: str | None = Field(
        default=None,
        description="Linear personal API key",
    )

    team_id: str | None = Field(default=None, description="Linear team id for workflow states")
    project_id: str | None = Field(default=None, description="Linear project id to track")
    label_name: str | None = Field(default=None, description="Label selecting tracked issues")

    api_url: str = Field(default=DEFAULT_API_URL, description="Linear GraphQL endpoint")

    timeout: float = Field(default=30.0, gt=0, description="HTTP timeout in seconds")

    page_size: int = Field(default=100, ge=1, le=250, description="Issues fetched per page")

    project_root: Path = Field(
        default=Path(),
        description="Path to project root containing linear-tracker.yml",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    model_config = {
        "env_prefix": "LINEAR_",
    }
