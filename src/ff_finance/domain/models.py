"""Domain models for ff_finance — pure dataclasses, no SQLAlchemy dependency.

``to_dict``/``from_dict`` give the JSON form used both on the wire and in the
cache: camelCase keys, Decimal amounts as 2dp strings, ISO8601 datetimes.
"""

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Any

from src.ff_common.datetime_utils import parse_datetime
from src.ff_common.money import format_amount, to_amount


class TransactionType(str, Enum):
    INCOME = "income"
    EXPENSE = "expense"


class BudgetPeriod(str, Enum):
    MONTHLY = "monthly"
    YEARLY = "yearly"


class TrendInterval(str, Enum):
    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse_optional(value: str | None) -> datetime | None:
    return parse_datetime(value) if value else None


@dataclass
class Category:
    id: str
    name: str
    icon: str | None = None
    color: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "icon": self.icon, "color": self.color}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Category":
        return cls(id=data["id"], name=data["name"], icon=data.get("icon"), color=data.get("color"))


@dataclass
class Transaction:
    id: str
    user_id: str
    amount: Decimal
    description: str
    category_id: str
    date: datetime
    type: TransactionType

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "amount": format_amount(self.amount),
            "description": self.description,
            "categoryId": self.category_id,
            "date": self.date.isoformat(),
            "type": self.type.value,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Transaction":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            amount=to_amount(data["amount"]),
            description=data["description"],
            category_id=data["categoryId"],
            date=parse_datetime(data["date"]),
            type=TransactionType(data["type"]),
        )


@dataclass
class Budget:
    id: str
    user_id: str
    category_id: str
    amount: Decimal
    period: BudgetPeriod
    year: int
    month: int | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "categoryId": self.category_id,
            "amount": format_amount(self.amount),
            "period": self.period.value,
            "month": self.month,
            "year": self.year,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Budget":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            category_id=data["categoryId"],
            amount=to_amount(data["amount"]),
            period=BudgetPeriod(data["period"]),
            year=data["year"],
            month=data.get("month"),
        )


@dataclass
class Goal:
    id: str
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    created_at: datetime
    deadline: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.user_id,
            "name": self.name,
            "targetAmount": format_amount(self.target_amount),
            "currentAmount": format_amount(self.current_amount),
            "deadline": _iso(self.deadline),
            "createdAt": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Goal":
        return cls(
            id=data["id"],
            user_id=data["userId"],
            name=data["name"],
            target_amount=to_amount(data["targetAmount"]),
            current_amount=to_amount(data["currentAmount"]),
            created_at=parse_datetime(data["createdAt"]),
            deadline=_parse_optional(data.get("deadline")),
        )


# ---------------------------------------------------------------------------
# Creation inputs (validated by the schema layer before reaching the store)
# ---------------------------------------------------------------------------


@dataclass
class NewCategory:
    name: str
    icon: str | None = None
    color: str | None = None


@dataclass
class NewTransaction:
    user_id: str
    amount: Decimal
    description: str
    category_id: str
    date: datetime
    type: TransactionType


@dataclass
class NewBudget:
    user_id: str
    category_id: str
    amount: Decimal
    period: BudgetPeriod
    year: int
    month: int | None = None


@dataclass
class NewGoal:
    user_id: str
    name: str
    target_amount: Decimal
    current_amount: Decimal
    deadline: datetime | None = None


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


@dataclass
class SpendingSummaryItem:
    category: str
    amount: Decimal

    def to_dict(self) -> dict[str, Any]:
        return {"category": self.category, "amount": format_amount(self.amount)}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "SpendingSummaryItem":
        return cls(category=data["category"], amount=to_amount(data["amount"]))


@dataclass
class TrendPoint:
    date: date
    total_income: Decimal
    total_expense: Decimal

    @property
    def net_balance(self) -> Decimal:
        return self.total_income - self.total_expense

    def to_dict(self) -> dict[str, Any]:
        return {
            "date": self.date.isoformat(),
            "total_income": format_amount(self.total_income),
            "total_expense": format_amount(self.total_expense),
            "net_balance": format_amount(self.net_balance),
        }
