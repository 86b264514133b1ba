"""Configuration routes."""

from __future__ import annotations

from fastapi import APIRouter, Request

from specguard.config.providers import PROVIDER_NAMES, list_available_models

router = APIRouter(tags=["config"])


@router.get("/config/models")
async def get_models() -> dict[str, list]:
    """Models AI-assisted verification can use."""
    return {"models": list_available_models()}


@router.get("/config/providers")
async def get_providers(request: Request) -> dict[str, list]:
    """Supported providers and whether an API key is set for each."""
    cfg = request.app.state.config
    keys = {"anthropic": cfg.anthropic_api_key, "gemini": cfg.gemini_api_key}
    return {"providers": [
        {"id": provider, "name": name, "configured": bool(keys.get(provider))}
        for provider, name in PROVIDER_NAMES.items()
    ]}
