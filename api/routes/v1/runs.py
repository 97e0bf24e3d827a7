"""
api/routes/v1/runs.py -- Audit/enforce runs against the hardening executor.

POST /runs awaits the executor and returns the run outcome. Remote failures
come back as status "failed" (and also set the session alert); a request made
while another run is in flight comes back as status "rejected" with reason
"busy" and never reaches the executor.

Rate limits are applied via slowapi. The @limiter.limit() decorator must sit
ABOVE @router.post so slowapi attaches the limit before FastAPI wraps it.
"""

from fastapi import APIRouter, Request

from api.limiter import limiter
from api.models import RunRequest, RunResponse, RunStateResponse
from core.models import RunMode
from core.session import DashboardSession

router = APIRouter()


@router.get("/runs", response_model=RunStateResponse)
async def get_run_state(request: Request) -> RunStateResponse:
    return RunStateResponse.from_state(request.app.state.session.orchestrator.state)


@limiter.limit("10/minute")
@router.post("/runs", response_model=RunResponse)
async def start_run(request: Request, body: RunRequest) -> RunResponse:
    session: DashboardSession = request.app.state.session
    result = await session.orchestrator.run(RunMode(body.mode.value))
    return RunResponse.from_result(result)
