"""ff_finance REST API — transactions, budgets, goals, categories, summaries, export.

Every endpoint requires a valid Bearer access token. Transaction writes at
or above MFA_AMOUNT_THRESHOLD also need a TOTP code in ``X-MFA-Token`` when
the user has MFA enabled.
"""

from decimal import Decimal
from typing import Annotated

from fastapi import APIRouter, Depends, Header, Query, Response, status

from src.container import Services
from src.ff_auth.auth.dependencies import get_current_user, get_services
from src.ff_auth.domain.models import User
from src.ff_common.errors import ValidationError
from src.ff_common.money import to_amount
from src.ff_finance.application.schemas import (
    BudgetCreateRequest,
    BudgetUpdateRequest,
    CategoryCreateRequest,
    GoalCreateRequest,
    GoalUpdateRequest,
    TransactionCreateRequest,
    TransactionUpdateRequest,
)
from src.ff_finance.domain.models import TrendInterval
from src.ff_finance.domain.trends import DEFAULT_LIMITS

router = APIRouter(tags=["finance"])

CurrentUser = Annotated[User, Depends(get_current_user)]
AppServices = Annotated[Services, Depends(get_services)]
MfaToken = Annotated[str | None, Header(alias="X-MFA-Token")]

_INVALID_INTERVAL = "Invalid interval. Must be 'daily', 'weekly', or 'monthly'"
_EXPORT_FORMATS = ("json", "csv")


def _check_mfa(services: Services, user: User, amount: Decimal, code: str | None) -> None:
    if amount >= to_amount(services.settings.MFA_AMOUNT_THRESHOLD):
        services.mfa.require_for_sensitive_op(user, code)


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


@router.get("/transactions")
async def list_transactions(user: CurrentUser, services: AppServices) -> list[dict]:
    return [tx.to_dict() for tx in await services.finance.get_transactions(user.id)]


@router.get("/transactions/{tx_id}")
async def get_transaction(tx_id: str, user: CurrentUser, services: AppServices) -> dict:
    return (await services.finance.get_transaction(user.id, tx_id)).to_dict()


@router.post("/transactions", status_code=status.HTTP_201_CREATED)
async def create_transaction(
    body: TransactionCreateRequest,
    user: CurrentUser,
    services: AppServices,
    mfa_token: MfaToken = None,
) -> dict:
    _check_mfa(services, user, body.amount, mfa_token)
    tx = await services.finance.create_transaction(body.to_domain(user.id))
    return tx.to_dict()


@router.patch("/transactions/{tx_id}")
async def update_transaction(
    tx_id: str,
    body: TransactionUpdateRequest,
    user: CurrentUser,
    services: AppServices,
    mfa_token: MfaToken = None,
) -> dict:
    changes = body.to_changes()
    if "amount" in changes:
        _check_mfa(services, user, changes["amount"], mfa_token)
    tx = await services.finance.update_transaction(user.id, tx_id, changes)
    return tx.to_dict()


@router.delete("/transactions/{tx_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_transaction(tx_id: str, user: CurrentUser, services: AppServices) -> Response:
    await services.finance.delete_transaction(user.id, tx_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------


@router.get("/budgets")
async def list_budgets(user: CurrentUser, services: AppServices) -> list[dict]:
    return [b.to_dict() for b in await services.finance.get_budgets(user.id)]


@router.get("/budgets/{budget_id}")
async def get_budget(budget_id: str, user: CurrentUser, services: AppServices) -> dict:
    return (await services.finance.get_budget(user.id, budget_id)).to_dict()


@router.post("/budgets", status_code=status.HTTP_201_CREATED)
async def create_budget(body: BudgetCreateRequest, user: CurrentUser, services: AppServices) -> dict:
    return (await services.finance.create_budget(body.to_domain(user.id))).to_dict()


@router.patch("/budgets/{budget_id}")
async def update_budget(
    budget_id: str, body: BudgetUpdateRequest, user: CurrentUser, services: AppServices
) -> dict:
    budget = await services.finance.update_budget(user.id, budget_id, body.to_changes())
    return budget.to_dict()


@router.delete("/budgets/{budget_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_budget(budget_id: str, user: CurrentUser, services: AppServices) -> Response:
    await services.finance.delete_budget(user.id, budget_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


@router.get("/goals")
async def list_goals(user: CurrentUser, services: AppServices) -> list[dict]:
    return [g.to_dict() for g in await services.finance.get_goals(user.id)]


@router.get("/goals/{goal_id}")
async def get_goal(goal_id: str, user: CurrentUser, services: AppServices) -> dict:
    return (await services.finance.get_goal(user.id, goal_id)).to_dict()


@router.post("/goals", status_code=status.HTTP_201_CREATED)
async def create_goal(body: GoalCreateRequest, user: CurrentUser, services: AppServices) -> dict:
    return (await services.finance.create_goal(body.to_domain(user.id))).to_dict()


@router.patch("/goals/{goal_id}")
async def update_goal(
    goal_id: str, body: GoalUpdateRequest, user: CurrentUser, services: AppServices
) -> dict:
    return (await services.finance.update_goal(user.id, goal_id, body.to_changes())).to_dict()


@router.delete("/goals/{goal_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_goal(goal_id: str, user: CurrentUser, services: AppServices) -> Response:
    await services.finance.delete_goal(user.id, goal_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


@router.get("/categories")
async def list_categories(user: CurrentUser, services: AppServices) -> list[dict]:
    return [c.to_dict() for c in await services.finance.get_categories()]


@router.post("/categories", status_code=status.HTTP_201_CREATED)
async def create_category(
    body: CategoryCreateRequest, user: CurrentUser, services: AppServices
) -> dict:
    return (await services.finance.create_category(body.to_domain())).to_dict()


# ---------------------------------------------------------------------------
# Summaries / export
# ---------------------------------------------------------------------------


@router.get("/summary")
@router.get("/summary/spending")
async def spending_summary(user: CurrentUser, services: AppServices) -> list[dict]:
    return [item.to_dict() for item in await services.finance.get_spending_summary(user.id)]


@router.get("/summary/trends")
async def trends(
    user: CurrentUser,
    services: AppServices,
    interval: str = Query("monthly", description="daily | weekly | monthly"),
    limit: int | None = Query(None, ge=1, le=366, description="Number of buckets"),
) -> list[dict]:
    try:
        bucket = TrendInterval(interval)
    except ValueError:
        raise ValidationError(_INVALID_INTERVAL) from None

    points = await services.finance.get_trends(user.id, bucket, limit or DEFAULT_LIMITS[bucket])
    return [p.to_dict() for p in points]


@router.get("/export", response_model=None)
async def export_transactions(
    user: CurrentUser,
    services: AppServices,
    format: str = Query("json", description="json | csv"),
) -> Response | list[dict]:
    if format not in _EXPORT_FORMATS:
        raise ValidationError("Invalid format. Must be 'json' or 'csv'")

    if format == "csv":
        return Response(
            content=await services.finance.export_csv(user.id),
            media_type="text/csv",
            headers={"Content-Disposition": "attachment; filename=transactions.csv"},
        )
    return [tx.to_dict() for tx in await services.finance.get_transactions(user.id)]
