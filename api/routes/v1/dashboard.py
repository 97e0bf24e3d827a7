"""
api/routes/v1/dashboard.py -- Session-wide dashboard state.

  GET    /dashboard          -- hardening level, counters, run/apply flags, alert
  GET    /alert              -- current alert (204 when none)
  DELETE /alert              -- dismiss the current alert
  GET    /settings/dry-run   -- dry-run flag
  PUT    /settings/dry-run   -- set dry-run flag

Handlers are async so they run on the event loop thread that owns the session.
"""

from fastapi import APIRouter, Request, Response

from api.models import AlertResponse, DashboardResponse, DryRunResponse, DryRunUpdate
from core.session import DashboardSession

router = APIRouter()


@router.get("/dashboard", response_model=DashboardResponse)
async def get_dashboard(request: Request) -> DashboardResponse:
    """Return the numbers behind the Security Hub stat cards.

    hardening_level is 100 * applied / total, recomputed from the registry on
    every call.
    """
    session: DashboardSession = request.app.state.session
    alert = session.alerts.current
    return DashboardResponse(
        **session.summary(),
        alert=AlertResponse.from_alert(alert) if alert else None,
    )


@router.get("/alert", response_model=AlertResponse, responses={204: {"description": "No alert"}})
async def get_alert(request: Request):
    session: DashboardSession = request.app.state.session
    if session.alerts.current is None:
        return Response(status_code=204)
    return AlertResponse.from_alert(session.alerts.current)


@router.delete("/alert", status_code=204)
async def dismiss_alert(request: Request) -> Response:
    request.app.state.session.alerts.dismiss()
    return Response(status_code=204)


@router.get("/settings/dry-run", response_model=DryRunResponse)
async def get_dry_run(request: Request) -> DryRunResponse:
    return DryRunResponse(enabled=request.app.state.session.controller.dry_run)


@router.put("/settings/dry-run", response_model=DryRunResponse)
async def set_dry_run(request: Request, body: DryRunUpdate) -> DryRunResponse:
    """Toggle dry-run. Takes effect for the next apply; a running one keeps its mode."""
    controller = request.app.state.session.controller
    controller.set_dry_run(body.enabled)
    return DryRunResponse(enabled=controller.dry_run)
