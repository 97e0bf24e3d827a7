"""
api/routes/v1/logs.py -- Activity log read views and wholesale clear.

GET ?order=oldest is the dashboard's chronological view; ?order=newest is
the audit trail's most-recent-first view. Both read the same buffer.
"""

from fastapi import APIRouter, Request, Response

from api.models import LogEntryResponse, LogOrderEnum

router = APIRouter()


@router.get("/logs", response_model=list[LogEntryResponse])
async def list_logs(request: Request, order: LogOrderEnum = LogOrderEnum.oldest) -> list[LogEntryResponse]:
    log = request.app.state.session.log
    entries = log.newest_first() if order is LogOrderEnum.newest else log.all()
    return [LogEntryResponse.from_entry(e) for e in entries]


@router.delete("/logs", status_code=204)
async def clear_logs(request: Request) -> Response:
    request.app.state.session.log.clear()
    return Response(status_code=204)
