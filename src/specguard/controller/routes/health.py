"""Health check endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Request
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


@router.get("/healthz")
async def healthz() -> dict:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(request: Request) -> dict:
    """Readiness check — verifies the plan database answers."""
    checks = {"database": False}

    try:
        async with request.app.state.session_factory() as session:
            await session.execute(text("SELECT 1"))
            checks["database"] = True
    except SQLAlchemyError as e:
        logger.warning("Database readiness check failed: %s", e)

    ready = all(checks.values())
    return {"status": "ready" if ready else "not_ready", "checks": checks}
