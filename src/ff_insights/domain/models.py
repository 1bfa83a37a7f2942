"""Domain models for ff_insights — pure dataclasses."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Any

from src.ff_common.money import format_amount


@dataclass
class CategoryBreakdown:
    category: str
    total: Decimal
    count: int


@dataclass
class InsightSummary:
    """Aggregated, user-anonymous view of one period; the only data an adapter sees."""

    total_income: Decimal
    total_expenses: Decimal
    category_breakdown: list[CategoryBreakdown]
    transaction_count: int
    period_start: datetime
    period_end: datetime

    @property
    def net_balance(self) -> Decimal:
        return self.total_income - self.total_expenses

    def to_dict(self) -> dict[str, Any]:
        return {
            "totalIncome": format_amount(self.total_income),
            "totalExpenses": format_amount(self.total_expenses),
            "netBalance": format_amount(self.net_balance),
            "categoryBreakdown": [
                {"category": c.category, "total": format_amount(c.total), "count": c.count}
                for c in self.category_breakdown
            ],
            "transactionCount": self.transaction_count,
            "dateRange": {
                "start": self.period_start.isoformat(),
                "end": self.period_end.isoformat(),
            },
        }


@dataclass
class InsightRequest:
    summary: InsightSummary


@dataclass
class InsightResponse:
    insights: str
    suggestions: list[str] = field(default_factory=list)
    flags: list[str] = field(default_factory=list)
    generated_at: datetime | None = None


@dataclass
class InsightRecord:
    """Latest insight for a user; saving a new one replaces the old."""

    user_id: str
    insights: str
    suggestions: list[str]
    flags: list[str]
    period_start: datetime
    period_end: datetime
    generated_at: datetime

    def to_dict(self) -> dict[str, Any]:
        return {
            "userId": self.user_id,
            "insights": self.insights,
            "suggestions": list(self.suggestions),
            "flags": list(self.flags),
            "periodStart": self.period_start.isoformat(),
            "periodEnd": self.period_end.isoformat(),
            "generatedAt": self.generated_at.isoformat(),
        }


@dataclass
class InsightJob:
    token: str
    user_id: str
    period_start: datetime
    period_end: datetime
