"""Provider failover for model-assisted verification.

A verification prompt is sent to the backend that serves the requested
model. When that provider keeps failing, the same prompt goes to the next
configured provider with that provider's substitute model.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace

from specguard.agent.base import AgentBackend, AgentResult, AgentTask, provider_for_model

logger = logging.getLogger(__name__)

SUBSTITUTE_MODELS: dict[str, str] = {
    "anthropic": "claude-sonnet-4-20250514",
    "gemini": "gemini-3-pro-preview",
}


@dataclass
class BackendRegistry:
    """Configured backends, keyed by the provider name each one reports."""

    backends: dict[str, AgentBackend] = field(default_factory=dict)

    def register(self, backend: AgentBackend) -> None:
        self.backends[backend.name] = backend

    def get(self, provider: str) -> AgentBackend | None:
        return self.backends.get(provider)

    def __contains__(self, provider: object) -> bool:
        return provider in self.backends

    @property
    def providers(self) -> list[str]:
        return list(self.backends)


@dataclass
class FailoverPolicy:
    # Providers tried after the model's own provider, in this order.
    order: list[str] = field(default_factory=lambda: ["anthropic", "gemini"])
    attempts_per_provider: int = 2
    substitute_models: dict[str, str] = field(default_factory=lambda: dict(SUBSTITUTE_MODELS))


class ProviderChain:
    """An AgentBackend that spreads one task over several providers."""

    def __init__(self, registry: BackendRegistry, policy: FailoverPolicy | None = None) -> None:
        self.registry = registry
        self.policy = policy or FailoverPolicy()

    @property
    def name(self) -> str:
        return "provider_chain"

    def provider_order(self, model: str) -> list[str]:
        """The model's own provider, then the policy order; unregistered ones skipped."""
        candidates = [provider_for_model(model), *self.policy.order]
        return [
            p for i, p in enumerate(candidates)
            if p in self.registry and p not in candidates[:i]
        ]

    def task_for(self, task: AgentTask, provider: str) -> AgentTask:
        """The task as sent to ``provider``, with its substitute model if foreign."""
        substitute = self.policy.substitute_models.get(provider)
        if provider_for_model(task.model) == provider or not substitute:
            return task
        logger.info("Sending %s to %s as %s (was %s)", task.role, provider, substitute, task.model)
        return replace(task, model=substitute)

    async def execute(self, task: AgentTask) -> AgentResult:
        providers = self.provider_order(task.model)
        if not providers:
            raise RuntimeError(
                f"No backend configured for {task.model}; have {self.registry.providers}"
            )

        errors: list[str] = []
        for provider in providers:
            backend = self.registry.get(provider)
            attempt_task = self.task_for(task, provider)
            for attempt in range(1, self.policy.attempts_per_provider + 1):
                try:
                    return await backend.execute(attempt_task)
                except Exception as e:
                    errors.append(f"{provider}: {e}")
                    logger.warning(
                        "%s call %d/%d for %s failed: %s",
                        provider, attempt, self.policy.attempts_per_provider, task.role, e,
                    )

        raise RuntimeError(f"All providers exhausted for {task.role}: {errors[-1]}")
