"""Audit route — risk report for uncommitted changes with no plan."""

from __future__ import annotations

from fastapi import APIRouter, Request, Response

router = APIRouter(tags=["audit"])


@router.get("/audit", response_model=None)
async def audit_working_tree(request: Request) -> dict | Response:
    """Audit the working tree; 204 when there is nothing to audit."""
    result = await request.app.state.verifier.audit_working_tree()
    if result is None:
        return Response(status_code=204)
    return result.to_dict()
