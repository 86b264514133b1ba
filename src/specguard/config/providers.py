"""Model registry.

Models that AI-assisted verification can be pointed at, with the per-token
costs the backends use to report spend.
"""

from __future__ import annotations

from typing import TypedDict


class ModelConfig(TypedDict):
    provider: str
    cost_input_1m: float  # USD per 1M input tokens
    cost_output_1m: float  # USD per 1M output tokens
    context_window: int


PROVIDER_NAMES: dict[str, str] = {
    "anthropic": "Anthropic",
    "gemini": "Google Gemini",
}


def _model(provider: str, cost_in: float, cost_out: float, context_window: int) -> ModelConfig:
    return {
        "provider": provider,
        "cost_input_1m": cost_in,
        "cost_output_1m": cost_out,
        "context_window": context_window,
    }


MODEL_REGISTRY: dict[str, ModelConfig] = {
    "claude-haiku-4-5-20251001": _model("anthropic", 0.80, 4.00, 200_000),
    "claude-sonnet-4-20250514": _model("anthropic", 3.00, 15.00, 200_000),
    "claude-opus-4-20250514": _model("anthropic", 15.00, 75.00, 200_000),
    "gemini-2.0-flash": _model("gemini", 0.10, 0.40, 1_000_000),
    "gemini-3-pro-preview": _model("gemini", 1.25, 10.00, 2_000_000),
}


def get_model_config(model_name: str) -> ModelConfig | None:
    return MODEL_REGISTRY.get(model_name)


def get_provider_for_model(model_name: str) -> str | None:
    """Registered provider key for a model, or ``None`` for unknown models."""
    config = get_model_config(model_name)
    return config["provider"] if config else None


def list_available_models() -> list[dict]:
    """All registered models, in registry order, for the config API."""
    return [
        {
            "id": model_id,
            "provider": PROVIDER_NAMES[cfg["provider"]],
            "provider_id": cfg["provider"],
            "context_window": cfg["context_window"],
        }
        for model_id, cfg in MODEL_REGISTRY.items()
    ]


def model_cost(
    model: str,
    input_tokens: int,
    output_tokens: int,
    default: tuple[float, float] = (3.00, 15.00),
) -> float:
    """USD cost of one call; ``default`` is the per-1M pricing for unregistered models."""
    cfg = get_model_config(model)
    cost_in, cost_out = (cfg["cost_input_1m"], cfg["cost_output_1m"]) if cfg else default
    return (input_tokens * cost_in + output_tokens * cost_out) / 1_000_000
