"""Configuration models."""

from __future__ import annotations

from pydantic import BaseModel, Field


class BootstrapConfig(BaseModel):
    """Bootstrap configuration loaded from environment variables.

    These are the settings needed to start the CLI or the HTTP controller.
    Per-verification tuning uses the defaults in ``specguard.config.defaults``.
    """

    database_url: str = Field(
        default="sqlite+aiosqlite:///.specguard/specs.db",
        description="Async SQLAlchemy database URL for plan storage.",
    )
    anthropic_api_key: str = Field(
        default="",
        description="Anthropic API key for the Claude backend.",
    )
    gemini_api_key: str = Field(
        default="",
        description="Google Gemini API key for the Gemini backend.",
    )
    default_model: str = Field(
        default="claude-sonnet-4-20250514",
        description="Model used by AI-assisted verification.",
    )
    repo_dir: str = Field(
        default=".",
        description="Working tree whose changes are audited.",
    )
    git_timeout: float = Field(default=30.0, gt=0)
    detector_timeout: float = Field(default=120.0, gt=0)
    scan_workers: int = Field(default=4, ge=1)
    controller_host: str = Field(default="127.0.0.1")
    controller_port: int = Field(default=8000)
    log_level: str = Field(default="INFO")
