"""Pydantic request/response schemas for ff_insights."""

from typing import Annotated, Any, Literal

from pydantic import BaseModel, BeforeValidator, ConfigDict
from pydantic.alias_generators import to_camel

from src.ff_common.datetime_utils import parse_period_end
from src.ff_finance.application.schemas import UtcDatetime


def _period_end(value: Any) -> Any:
    if isinstance(value, str):
        return parse_period_end(value)
    return value


# the window is inclusive, so "endDate": "2024-03-31" covers all of March 31
PeriodEnd = Annotated[UtcDatetime, BeforeValidator(_period_end)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class InsightRequestBody(CamelModel):
    start_date: UtcDatetime
    end_date: PeriodEnd


class InsightStatusResponse(CamelModel):
    status: Literal["cached", "processing"]
    job_id: str | None = None
