"""Model backend protocol and the request/response records it exchanges."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Protocol

from specguard.config.providers import get_provider_for_model

# Model-name prefixes that identify a provider for unregistered models.
_PROVIDER_PREFIXES = (("claude", "anthropic"), ("gemini", "gemini"))


def provider_for_model(model: str) -> str:
    """Provider key serving ``model``; ``"unknown"`` if nothing claims it."""
    provider = get_provider_for_model(model)
    if provider:
        return provider
    for prefix, name in _PROVIDER_PREFIXES:
        if model.startswith(prefix):
            return name
    return "unknown"


@dataclass
class AgentTask:
    """One prompt for a model: no tools, no conversation history."""

    role: str  # prompt template name, e.g. "spec_verifier"
    system_prompt: str
    user_prompt: str
    model: str = "claude-sonnet-4-20250514"
    max_tokens: int = 4096


@dataclass
class AgentResult:
    output: str  # concatenated reply text
    model: str = ""
    input_tokens: int = 0
    output_tokens: int = 0
    cost_usd: float = 0.0


class AgentBackend(Protocol):
    """A model provider client.

    ``name`` is the provider key the registry and the failover chain use.
    """

    @property
    def name(self) -> str: ...

    async def execute(self, task: AgentTask) -> AgentResult: ...
