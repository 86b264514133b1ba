"""Plan routes — CRUD over stored specs, phases and verification."""

from __future__ import annotations

from fastapi import APIRouter, HTTPException, Request, Response

from specguard.models.spec import Phase, PhaseStatus, Spec, SpecCreate, SpecStatus, SpecUpdate

router = APIRouter(tags=["plans"])


def _not_found(spec_id: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"Plan '{spec_id}' not found")


@router.get("/plans")
async def list_plans(request: Request, status: SpecStatus | None = None) -> list[Spec]:
    """List plans, most recently updated first."""
    return await request.app.state.store.list(status)


@router.post("/plans", status_code=201)
async def create_plan(data: SpecCreate, request: Request) -> Spec:
    return await request.app.state.store.create(data)


@router.get("/plans/{spec_id}")
async def get_plan(spec_id: str, request: Request) -> Spec:
    spec = await request.app.state.store.get(spec_id)
    if spec is None:
        raise _not_found(spec_id)
    return spec


@router.patch("/plans/{spec_id}")
async def update_plan(spec_id: str, changes: SpecUpdate, request: Request) -> Spec:
    spec = await request.app.state.store.update(spec_id, changes)
    if spec is None:
        raise _not_found(spec_id)
    return spec


@router.delete("/plans/{spec_id}", status_code=204)
async def delete_plan(spec_id: str, request: Request) -> Response:
    if not await request.app.state.store.delete(spec_id):
        raise _not_found(spec_id)
    return Response(status_code=204)


@router.post("/plans/{spec_id}/phases", status_code=201)
async def add_phase(spec_id: str, phase: Phase, request: Request) -> Phase:
    added = await request.app.state.store.add_phase(spec_id, phase)
    if added is None:
        raise _not_found(spec_id)
    return added


@router.put("/plans/{spec_id}/phases/{phase_id}/status")
async def set_phase_status(
    spec_id: str, phase_id: str, status: PhaseStatus, request: Request
) -> dict:
    if not await request.app.state.store.update_phase_status(spec_id, phase_id, status):
        raise HTTPException(
            status_code=404, detail=f"Phase '{phase_id}' not found in plan '{spec_id}'"
        )
    return {"spec_id": spec_id, "phase_id": phase_id, "status": status.value}


@router.post("/plans/{spec_id}/verify")
async def verify_plan(spec_id: str, request: Request, use_ai: bool = False) -> dict:
    """Verify uncommitted changes against a plan.

    Detector failures are reported in ``detector_error``, not as an HTTP error.
    """
    report = await request.app.state.verifier.verify(spec_id, use_ai=use_ai)
    if report is None:
        raise _not_found(spec_id)
    return report.to_dict()
