"""Load bootstrap configuration from environment variables."""

from __future__ import annotations

import os

from specguard.models.config import BootstrapConfig

_ENV_PREFIX = "SPECGUARD_"

# SPECGUARD_<suffix> -> BootstrapConfig field
_ENV_FIELDS = {
    "DATABASE_URL": "database_url",
    "ANTHROPIC_API_KEY": "anthropic_api_key",
    "GEMINI_API_KEY": "gemini_api_key",
    "MODEL": "default_model",
    "REPO_DIR": "repo_dir",
    "GIT_TIMEOUT": "git_timeout",
    "DETECTOR_TIMEOUT": "detector_timeout",
    "SCAN_WORKERS": "scan_workers",
    "CONTROLLER_HOST": "controller_host",
    "CONTROLLER_LISTEN_PORT": "controller_port",
    "LOG_LEVEL": "log_level",
}


def load_bootstrap_config(environ: dict[str, str] | None = None) -> BootstrapConfig:
    """Build BootstrapConfig from ``SPECGUARD_*`` variables; unset ones keep defaults.

    Raises pydantic.ValidationError when a variable holds an invalid value.
    """
    env = os.environ if environ is None else environ
    overrides = {
        field: env[_ENV_PREFIX + suffix]
        for suffix, field in _ENV_FIELDS.items()
        if _ENV_PREFIX + suffix in env
    }
    return BootstrapConfig(**overrides)
