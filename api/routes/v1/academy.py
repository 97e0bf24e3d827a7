"""
api/routes/v1/academy.py -- Security education lookups.

The provider never fails: without a model API key, or when the model call
fails, the response carries fixed offline text. Each lookup may cost a model
call, hence the rate limit.
"""

from typing import Annotated

from fastapi import APIRouter, Query, Request

from api.limiter import limiter
from api.models import EducationResponse
from core.education import ACADEMY_TOPICS
from core.session import DashboardSession

router = APIRouter()


@router.get("/academy/topics", response_model=list[str])
async def list_topics() -> list[str]:
    return list(ACADEMY_TOPICS)


@limiter.limit("20/minute")
@router.get("/academy", response_model=EducationResponse)
async def explain_topic(
    request: Request,
    topic: Annotated[str, Query(min_length=1, max_length=200)],
) -> EducationResponse:
    session: DashboardSession = request.app.state.session
    content = await session.explain(topic)
    return EducationResponse.from_content(content)
