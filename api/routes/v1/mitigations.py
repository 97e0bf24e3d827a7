"""
api/routes/v1/mitigations.py -- Hardening catalog and the apply workflow.

Route registration order matters: /mitigations/{mitigation_id}/apply and
/mitigations/{mitigation_id} do not collide, but keep literal paths above
parameterised ones if more are added.

Apply semantics:
  - default: the workflow is scheduled and the route answers 202 at once.
    Poll GET /dashboard (hardening_in_progress, apply_phase) for progress.
  - ?wait=true: the route awaits the workflow and answers 200 with the
    terminal status (applied | skipped).
  - rejected requests (unknown id, already applied, another apply running)
    answer 200 with status "rejected" and a reason. They are not errors:
    nothing was attempted and nothing changed.
"""

from fastapi import APIRouter, HTTPException, Request, Response

from api.models import ApplyResponse, ErrorDetail, MitigationResponse
from core.models import ApplyStatus
from core.session import DashboardSession

router = APIRouter()


@router.get("/mitigations", response_model=list[MitigationResponse])
async def list_mitigations(request: Request, order: str = "catalog") -> list[MitigationResponse]:
    """List mitigations in catalog order, or most severe first with ?order=risk."""
    registry = request.app.state.session.registry
    records = registry.by_risk() if order == "risk" else registry.list()
    return [MitigationResponse.from_record(r) for r in records]


@router.get("/mitigations/{mitigation_id}", response_model=MitigationResponse)
async def get_mitigation(request: Request, mitigation_id: str) -> MitigationResponse:
    record = request.app.state.session.registry.find(mitigation_id)
    if record is None:
        raise HTTPException(
            status_code=404,
            detail=ErrorDetail(
                code="not_found",
                message=f"Mitigation {mitigation_id[:50]} not found.",
            ).model_dump(),
        )
    return MitigationResponse.from_record(record)


@router.post("/mitigations/{mitigation_id}/apply", response_model=ApplyResponse)
async def apply_mitigation(
    request: Request,
    response: Response,
    mitigation_id: str,
    wait: bool = False,
) -> ApplyResponse:
    session: DashboardSession = request.app.state.session
    controller = session.controller

    if wait:
        result = await controller.apply(mitigation_id)
    else:
        result = controller.submit(mitigation_id)
        if result.status is ApplyStatus.accepted:
            response.status_code = 202

    return ApplyResponse.from_result(result)
