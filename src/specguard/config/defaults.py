"""Defaults for verification runs.

Bootstrap settings (database, keys, timeouts) live in ``BootstrapConfig``;
these are the knobs that shape a single verification.
"""

from __future__ import annotations

VERIFY_DEFAULTS: dict = {
    # Providers tried, in order, after the configured model's own provider
    "failover_order": ["anthropic", "gemini"],
    "attempts_per_provider": 2,
    "max_tokens": 4096,
    # Cap on changed files listed in the verifier prompt
    "max_prompt_files": 200,
}


def get_verify_defaults() -> dict:
    """Return a copy of the verification defaults, safe to mutate."""
    return {**VERIFY_DEFAULTS, "failover_order": list(VERIFY_DEFAULTS["failover_order"])}
