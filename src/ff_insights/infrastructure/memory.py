"""In-memory InsightStore for local dev and tests (DATABASE_URL unset)."""

from dataclasses import replace

from src.ff_insights.domain.models import InsightRecord


class InMemoryInsightStore:
    def __init__(self) -> None:
        self._records: dict[str, InsightRecord] = {}

    async def get_latest_insight(self, user_id: str) -> InsightRecord | None:
        record = self._records.get(user_id)
        return replace(record) if record else None

    async def save_insight(self, record: InsightRecord) -> InsightRecord:
        self._records[record.user_id] = replace(record)
        return replace(record)
