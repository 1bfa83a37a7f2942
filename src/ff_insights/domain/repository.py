"""InsightStore Protocol — persistence interface for ff_insights."""

from typing import Protocol

from src.ff_insights.domain.models import InsightRecord


class InsightStoreProtocol(Protocol):
    async def get_latest_insight(self, user_id: str) -> InsightRecord | None: ...

    async def save_insight(self, record: InsightRecord) -> InsightRecord:
        """Insert or replace the user's record."""
        ...
