"""AI model adapter boundary.

The queue only ever talks to ``InsightsAdapterProtocol``; which model sits
behind it is chosen by AI_MODEL_PROVIDER. ``mock`` produces deterministic
text from the summary and needs no network. An adapter may leave
``generated_at`` unset, in which case the queue stamps it.
"""

from decimal import Decimal
from typing import Protocol

from src.ff_common.money import format_amount
from src.ff_insights.domain.models import InsightRequest, InsightResponse

# share of total expenses above which a category is flagged
HIGH_SPEND_RATIO = Decimal("0.3")


class InsightsAdapterProtocol(Protocol):
    async def generate_insights(self, request: InsightRequest) -> InsightResponse: ...


class MockInsightsAdapter:
    async def generate_insights(self, request: InsightRequest) -> InsightResponse:
        summary = request.summary
        breakdown = sorted(summary.category_breakdown, key=lambda c: c.total, reverse=True)

        suggestions = [
            "Set a weekly budget for your largest category and track progress",
            "Consider automating savings with a small transfer each payday",
        ]
        if breakdown:
            suggestions.insert(0, f"Review {breakdown[0].category} expenses and try reducing by 10%")

        threshold = summary.total_expenses * HIGH_SPEND_RATIO
        flags = [f"High spend in {c.category}" for c in breakdown if c.total > threshold]

        return InsightResponse(
            insights=(
                f"Your expenses for the period were ${format_amount(summary.total_expenses)} "
                f"with {summary.transaction_count} transactions. "
                "Consider reviewing top categories."
            ),
            suggestions=suggestions,
            flags=flags,
        )


_ADAPTERS: dict[str, type] = {
    "mock": MockInsightsAdapter,
}


def create_insights_adapter(provider: str) -> InsightsAdapterProtocol:
    try:
        return _ADAPTERS[provider.lower()]()
    except KeyError:
        raise ValueError(f"Unknown AI_MODEL_PROVIDER: {provider!r}") from None
