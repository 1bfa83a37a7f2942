"""ff_insights REST API — request and poll AI insights."""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status

from src.container import Services
from src.ff_auth.auth.dependencies import get_current_user, get_services
from src.ff_auth.domain.models import User
from src.ff_common.errors import NotFoundError
from src.ff_insights.application.queue import CACHED
from src.ff_insights.application.schemas import InsightRequestBody, InsightStatusResponse

router = APIRouter(prefix="/ai", tags=["insights"])


@router.post("/insights")
async def request_insights(
    body: InsightRequestBody,
    response: Response,
    user: Annotated[User, Depends(get_current_user)],
    services: Annotated[Services, Depends(get_services)],
) -> dict:
    """200 ``{status: "cached"}`` when a fresh insight exists, else 202 with a job id to poll."""
    token = await services.insights.request(user.id, body.start_date, body.end_date)
    if token == CACHED:
        return InsightStatusResponse(status="cached").model_dump(by_alias=True, exclude_none=True)

    response.status_code = status.HTTP_202_ACCEPTED
    return InsightStatusResponse(status="processing", job_id=token).model_dump(by_alias=True)


@router.get("/insights")
async def get_insights(
    user: Annotated[User, Depends(get_current_user)],
    services: Annotated[Services, Depends(get_services)],
) -> dict:
    record = await services.insights.get(user.id)
    if record is None:
        raise NotFoundError("Insight")
    return record.to_dict()
