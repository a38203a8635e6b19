"""Application settings."""

from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings."""

    project_root: Path = Field(
        default=Path(),
        description="Path to project root containing flowboard.yml",
    )

    verbose: int = Field(
        default=0,
        description="Verbosity level (0=off, 1=INFO, 2+=DEBUG)",
    )

    log_file: Path | None = Field(
        default=None,
        description="Optional path to write logs to file",
    )

    api_url: str | None = Field(
        default=None,
        description="Base URL of a board REST API; files under project_root are used when unset",
    )

    api_token: str | None = Field(
        default=None,
        description="Bearer token for the board REST API",
    )

    request_timeout: float = Field(
        default=30.0,
        gt=0,
        description="Timeout in seconds for board REST API requests",
    )

    renumber_step: float = Field(
        default=1000.0,
        gt=0,
        description="Spacing between positions after a column is renumbered",
    )

    min_position_gap: float = Field(
        default=1e-6,
        gt=0,
        description="Smallest gap between neighbouring positions that may still be split",
    )

    refresh_after_confirm: bool = Field(
        default=False,
        description="Re-fetch affected columns after the store confirms a move",
    )

    model_config = {
        "env_prefix": "FLOWBOARD_",
    }
