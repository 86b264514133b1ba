"""Tests for bootstrap configuration and verification defaults."""

from __future__ import annotations

import pytest
from pydantic import ValidationError

from specguard.config.bootstrap import load_bootstrap_config
from specguard.config.defaults import VERIFY_DEFAULTS, get_verify_defaults
from specguard.config.providers import (
    get_model_config,
    get_provider_for_model,
    list_available_models,
)


class TestBootstrapConfig:
    def test_defaults(self, monkeypatch) -> None:
        monkeypatch.delenv("SPECGUARD_MODEL", raising=False)
        monkeypatch.delenv("SPECGUARD_SCAN_WORKERS", raising=False)
        cfg = load_bootstrap_config()
        assert cfg.default_model == "claude-sonnet-4-20250514"
        assert cfg.scan_workers == 4

    def test_env_overrides(self, monkeypatch) -> None:
        monkeypatch.setenv("SPECGUARD_MODEL", "gemini-2.0-flash")
        monkeypatch.setenv("SPECGUARD_DETECTOR_TIMEOUT", "5")
        monkeypatch.setenv("SPECGUARD_CONTROLLER_LISTEN_PORT", "9000")
        cfg = load_bootstrap_config()
        assert cfg.default_model == "gemini-2.0-flash"
        assert cfg.detector_timeout == 5.0
        assert cfg.controller_port == 9000

    def test_explicit_environ(self) -> None:
        cfg = load_bootstrap_config({"SPECGUARD_REPO_DIR": "/srv/app", "OTHER": "x"})
        assert cfg.repo_dir == "/srv/app"
        assert cfg.log_level == "INFO"

    def test_invalid_value_rejected(self, monkeypatch) -> None:
        monkeypatch.setenv("SPECGUARD_SCAN_WORKERS", "0")
        with pytest.raises(ValidationError):
            load_bootstrap_config()


class TestDefaults:
    def test_copy_is_independent(self) -> None:
        defaults = get_verify_defaults()
        defaults["failover_order"].append("other")
        assert VERIFY_DEFAULTS["failover_order"] == ["anthropic", "gemini"]

    def test_get_model_config(self) -> None:
        assert get_model_config("gemini-2.0-flash")["context_window"] == 1_000_000
        assert get_model_config("gpt-4") is None

    def test_model_registry(self) -> None:
        assert get_provider_for_model("claude-opus-4-20250514") == "anthropic"
        assert get_provider_for_model("gpt-4") is None
        ids = [m["id"] for m in list_available_models()]
        assert "gemini-2.0-flash" in ids
