"""Wiring — builds a Verifier and its collaborators from BootstrapConfig."""

from __future__ import annotations

import logging

from specguard.agent.claude import ClaudeAgentBackend
from specguard.agent.gemini import GeminiAgentBackend
from specguard.agent.provider_chain import BackendRegistry, FailoverPolicy, ProviderChain
from specguard.config.defaults import get_verify_defaults
from specguard.git.working_tree import GitWorkingTree
from specguard.models.config import BootstrapConfig
from specguard.verification.detectors import AssistedDetector, LocalDetector
from specguard.verification.orchestrator import SpecLookup, Verifier

logger = logging.getLogger(__name__)


def build_backend_registry(cfg: BootstrapConfig) -> BackendRegistry:
    """Register a backend for every provider that has an API key."""
    registry = BackendRegistry()
    if cfg.anthropic_api_key:
        registry.register(ClaudeAgentBackend(cfg.anthropic_api_key))
    if cfg.gemini_api_key:
        registry.register(GeminiAgentBackend(cfg.gemini_api_key))
    return registry


def build_verifier(cfg: BootstrapConfig, store: SpecLookup) -> Verifier:
    """Build a Verifier; AI verification is only available when a key is set."""
    defaults = get_verify_defaults()
    registry = build_backend_registry(cfg)

    assisted = None
    if registry.providers:
        chain = ProviderChain(registry, FailoverPolicy(
            order=defaults["failover_order"],
            attempts_per_provider=defaults["attempts_per_provider"],
        ))
        assisted = AssistedDetector(
            chain,
            model=cfg.default_model,
            max_tokens=defaults["max_tokens"],
            max_prompt_files=defaults["max_prompt_files"],
        )
    else:
        logger.debug("No model API keys configured; AI verification disabled")

    return Verifier(
        store=store,
        working_tree=GitWorkingTree(cfg.repo_dir, timeout=cfg.git_timeout),
        local_detector=LocalDetector(),
        assisted_detector=assisted,
        detector_timeout=cfg.detector_timeout,
        scan_workers=cfg.scan_workers,
    )
