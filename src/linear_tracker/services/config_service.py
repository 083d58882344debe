"""Configuration service for loading linear-tracker.yml."""

from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import yaml
from pydantic import ValidationError

from ..models import TrackerConfig

if TYPE_CHECKING:
    from ..config import Settings

logger = logging.getLogger(__name__)


class ConfigService:
    """Service for loading and caching tracker configuration."""

    CONFIG_FILE = "linear-tracker.yml"

    def __init__(self, project_root: Path) -> None:
        """Initialize the config service.

        Args:
            project_root: Directory containing linear-tracker.yml
        """
        self.project_root = project_root
        self._config: TrackerConfig | None = None
        self._config_error: str | None = None

    @property
    def config_path(self) -> Path:
        return self.project_root / self.CONFIG_FILE

    @property
    def has_config_error(self) -> bool:
        """Check if there was an error loading config."""
        return self._config_error is not None

    @property
    def config_error(self) -> str | None:
        """Get the config error message if any."""
        return self._config_error

    def get_config(self) -> TrackerConfig:
        """Get configuration, loading from file if not cached."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def resolve(self, settings: Settings) -> TrackerConfig:
        """Merge environment settings over the file configuration.

        Values explicitly set in ``settings`` win; anything left unset keeps
        the file value (or the built-in default). Overrides that fail
        validation are reported via ``config_error`` and ignored.
        """
        config = self.get_config()
        overrides = {
            key: value
            for key, value in (
                ("team_id", settings.team_id),
                ("project_id", settings.project_id),
                ("label_name", settings.label_name),
            )
            if value
        }
        if not overrides:
            return config

        try:
            return TrackerConfig.model_validate({**config.model_dump(), **overrides})
        except ValidationError as e:
            # Bad env values are reported like bad file values; keep the file config
            self._config_error = f"Invalid LINEAR_* override: {e}"
            logger.warning(self._config_error)
            return config

    def reload(self) -> None:
        """Clear cached configuration, forcing reload on next access."""
        self._config = None
        self._config_error = None

    def _load_config(self) -> TrackerConfig:
        """Load configuration from file or return default."""
        config_path = self.config_path
        self._config_error = None

        if not config_path.exists():
            logger.debug("No %s found, using defaults", self.CONFIG_FILE)
            return TrackerConfig.default()

        try:
            with open(config_path) as f:
                data = yaml.safe_load(f)

            if data is None:
                self._config_error = f"{self.CONFIG_FILE} is empty"
                logger.warning(self._config_error)
                return TrackerConfig.default()

            if not isinstance(data, dict):
                self._config_error = f"{self.CONFIG_FILE} must contain a mapping"
                logger.warning(self._config_error)
                return TrackerConfig.default()

            config = TrackerConfig(**data)
            logger.info(
                "Loaded %s (project=%s, team=%s, label=%s)",
                self.CONFIG_FILE,
                config.project_id or "-",
                config.team_id or "-",
                config.label_name,
            )
            return config

        except yaml.YAMLError as e:
            self._config_error = f"Invalid YAML in {self.CONFIG_FILE}: {e}"
            logger.warning(self._config_error)
            return TrackerConfig.default()

        except (OSError, ValidationError) as e:
            self._config_error = f"Error loading {self.CONFIG_FILE}: {e}"
            logger.warning(self._config_error)
            return TrackerConfig.default()
