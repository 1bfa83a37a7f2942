"""Pydantic request schemas for ff_finance.

Each request model is the typed, validated input for one mutation; FastAPI
turns validation failures into 400 before a handler runs. ``to_domain`` /
``to_changes`` hand the store plain dataclasses or whitelisted field dicts.
"""

from datetime import datetime
from decimal import Decimal
from typing import Annotated, Any

from pydantic import BaseModel, BeforeValidator, ConfigDict, Field
from pydantic.alias_generators import to_camel

from src.ff_common.datetime_utils import ensure_utc, parse_datetime, utc_now
from src.ff_common.money import ZERO, to_amount
from src.ff_finance.domain.models import (
    BudgetPeriod,
    NewBudget,
    NewCategory,
    NewGoal,
    NewTransaction,
    TransactionType,
)


def _positive_amount(value: Any) -> Decimal:
    amount = to_amount(value)
    if amount <= ZERO:
        raise ValueError("amount must be greater than 0")
    return amount


def _non_negative_amount(value: Any) -> Decimal:
    amount = to_amount(value)
    if amount < ZERO:
        raise ValueError("amount must not be negative")
    return amount


def _utc_datetime(value: Any) -> Any:
    if isinstance(value, str):
        return parse_datetime(value)
    if isinstance(value, datetime):
        return ensure_utc(value)
    return value


Amount = Annotated[Decimal, BeforeValidator(_positive_amount)]
NonNegativeAmount = Annotated[Decimal, BeforeValidator(_non_negative_amount)]
UtcDatetime = Annotated[datetime, BeforeValidator(_utc_datetime)]


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")

    def _set_fields(self, nullable: frozenset[str] = frozenset()) -> dict[str, Any]:
        """Fields the client actually sent; explicit nulls only for nullable columns."""
        changes = self.model_dump(exclude_unset=True)
        return {k: v for k, v in changes.items() if v is not None or k in nullable}


# ---------------------------------------------------------------------------
# Transactions
# ---------------------------------------------------------------------------


class TransactionCreateRequest(CamelModel):
    amount: Amount
    description: str = Field(..., min_length=1, max_length=500)
    category_id: str = Field(..., min_length=1)
    type: TransactionType
    date: UtcDatetime | None = None

    def to_domain(self, user_id: str) -> NewTransaction:
        return NewTransaction(
            user_id=user_id,
            amount=self.amount,
            description=self.description,
            category_id=self.category_id,
            date=self.date or utc_now(),
            type=self.type,
        )


class TransactionUpdateRequest(CamelModel):
    amount: Amount | None = None
    description: str | None = Field(None, min_length=1, max_length=500)
    category_id: str | None = Field(None, min_length=1)
    type: TransactionType | None = None
    date: UtcDatetime | None = None

    def to_changes(self) -> dict[str, Any]:
        return self._set_fields()


# ---------------------------------------------------------------------------
# Budgets
# ---------------------------------------------------------------------------


class BudgetCreateRequest(CamelModel):
    category_id: str = Field(..., min_length=1)
    amount: Amount
    period: BudgetPeriod
    year: int = Field(..., ge=1970, le=9999)
    month: int | None = Field(None, ge=1, le=12)

    def to_domain(self, user_id: str) -> NewBudget:
        return NewBudget(
            user_id=user_id,
            category_id=self.category_id,
            amount=self.amount,
            period=self.period,
            year=self.year,
            month=self.month,
        )


class BudgetUpdateRequest(CamelModel):
    category_id: str | None = Field(None, min_length=1)
    amount: Amount | None = None
    period: BudgetPeriod | None = None
    year: int | None = Field(None, ge=1970, le=9999)
    month: int | None = Field(None, ge=1, le=12)

    def to_changes(self) -> dict[str, Any]:
        return self._set_fields(nullable=frozenset({"month"}))


# ---------------------------------------------------------------------------
# Goals
# ---------------------------------------------------------------------------


class GoalCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=200)
    target_amount: Amount
    current_amount: NonNegativeAmount = ZERO
    deadline: UtcDatetime | None = None

    def to_domain(self, user_id: str) -> NewGoal:
        return NewGoal(
            user_id=user_id,
            name=self.name,
            target_amount=self.target_amount,
            current_amount=self.current_amount,
            deadline=self.deadline,
        )


class GoalUpdateRequest(CamelModel):
    name: str | None = Field(None, min_length=1, max_length=200)
    target_amount: Amount | None = None
    current_amount: NonNegativeAmount | None = None
    deadline: UtcDatetime | None = None

    def to_changes(self) -> dict[str, Any]:
        return self._set_fields(nullable=frozenset({"deadline"}))


# ---------------------------------------------------------------------------
# Categories
# ---------------------------------------------------------------------------


class CategoryCreateRequest(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    icon: str | None = Field(None, max_length=32)
    color: str | None = Field(None, pattern=r"^#[0-9a-fA-F]{6}$")

    def to_domain(self) -> NewCategory:
        return NewCategory(name=self.name, icon=self.icon, color=self.color)
