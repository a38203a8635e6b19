"""Configuration service for loading flowboard.yml."""

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import ValidationError

from ..models import BoardConfig, FlowboardConfig

logger = logging.getLogger(__name__)


class ConfigService:
    """Loads flowboard.yml once and falls back to the default board on any error.

    The error is kept so callers can surface it; a broken config file never
    stops the board from opening.
    """

    CONFIG_FILE = "flowboard.yml"

    def __init__(self, project_root: Path) -> None:
        """
        Args:
            project_root: Directory containing flowboard.yml; task_root in the
                file is resolved against it
        """
        self.project_root = project_root
        self.config_path = project_root / self.CONFIG_FILE
        self._config: FlowboardConfig | None = None
        self._config_error: str | None = None

    @property
    def has_config_error(self) -> bool:
        return self._config_error is not None

    @property
    def config_error(self) -> str | None:
        return self._config_error

    @property
    def task_root(self) -> Path:
        """Absolute path of the directory holding task files."""
        return self.project_root / self.get_config().task_root

    def get_config(self) -> FlowboardConfig:
        """Get configuration, loading from file if not cached."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def get_board_config(self) -> BoardConfig:
        return self.get_config().board

    def reload(self) -> None:
        """Drop the cached configuration; the next access reads the file again."""
        self._config = None
        self._config_error = None

    def _load_config(self) -> FlowboardConfig:
        self._config_error = None
        if not self.config_path.exists():
            logger.debug("No %s found, using defaults", self.CONFIG_FILE)
            return FlowboardConfig.default()

        try:
            config = FlowboardConfig(**self._read_mapping())
        except yaml.YAMLError as e:
            return self._fallback(f"Invalid YAML in {self.CONFIG_FILE}: {e}")
        except ValidationError as e:
            return self._fallback(f"Invalid configuration in {self.CONFIG_FILE}: {e}")
        except ValueError as e:
            return self._fallback(str(e))

        logger.info("Loaded %s with %d columns", self.CONFIG_FILE, len(config.board.columns))
        return config

    def _read_mapping(self) -> dict[str, Any]:
        with self.config_path.open() as f:
            data = yaml.safe_load(f)
        if data is None:
            raise ValueError(f"{self.CONFIG_FILE} is empty")
        if not isinstance(data, dict):
            raise ValueError(f"{self.CONFIG_FILE} must contain a mapping")
        return data

    def _fallback(self, message: str) -> FlowboardConfig:
        self._config_error = message
        logger.warning(message)
        return FlowboardConfig.default()
