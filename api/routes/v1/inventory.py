"""
api/routes/v1/inventory.py -- Network attack surface snapshot.

The snapshot is refreshed by the session's polling task. POST /refresh forces
an immediate fetch; on failure the previous snapshot is returned unchanged
with refreshed=false and the session alert set.
"""

from fastapi import APIRouter, Request

from api.limiter import limiter
from api.models import InventoryResponse, RefreshResponse
from core.session import DashboardSession

router = APIRouter()


@router.get("/inventory", response_model=InventoryResponse)
async def get_inventory(request: Request) -> InventoryResponse:
    return InventoryResponse.from_snapshot(request.app.state.session.inventory.snapshot)


@limiter.limit("20/minute")
@router.post("/inventory/refresh", response_model=RefreshResponse)
async def refresh_inventory(request: Request) -> RefreshResponse:
    session: DashboardSession = request.app.state.session
    refreshed = await session.inventory.refresh()
    return RefreshResponse(
        refreshed=refreshed,
        inventory=InventoryResponse.from_snapshot(session.inventory.snapshot),
    )
