"""InsightStore — PostgreSQL implementation of InsightStoreProtocol.

One row per user (``user_id`` is the primary key); saving upserts.
suggestions/flags are JSONB arrays.
"""

import json

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from src.ff_common.database import translate_db_errors
from src.ff_insights.domain.models import InsightRecord

_INSIGHT_COLUMNS = (
    "user_id, insights, suggestions, flags, period_start, period_end, generated_at"
)

_GET_INSIGHT_SQL = text(f"""
    SELECT {_INSIGHT_COLUMNS}
    FROM insights
    WHERE user_id = CAST(:user_id AS UUID)
""")

_UPSERT_INSIGHT_SQL = text(f"""
    INSERT INTO insights ({_INSIGHT_COLUMNS})
    VALUES (CAST(:user_id AS UUID), :insights, CAST(:suggestions AS JSONB),
            CAST(:flags AS JSONB), :period_start, :period_end, :generated_at)
    ON CONFLICT (user_id) DO UPDATE SET
        insights     = EXCLUDED.insights,
        suggestions  = EXCLUDED.suggestions,
        flags        = EXCLUDED.flags,
        period_start = EXCLUDED.period_start,
        period_end   = EXCLUDED.period_end,
        generated_at = EXCLUDED.generated_at
    RETURNING {_INSIGHT_COLUMNS}
""")


def _json_list(value: object) -> list[str]:
    # asyncpg hands back JSONB as text unless a codec is registered
    if isinstance(value, str):
        value = json.loads(value)
    return [str(v) for v in value or []]  # type: ignore[union-attr]


def _row_to_insight(row: object) -> InsightRecord:
    return InsightRecord(
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        insights=row.insights,  # type: ignore[attr-defined]
        suggestions=_json_list(row.suggestions),  # type: ignore[attr-defined]
        flags=_json_list(row.flags),  # type: ignore[attr-defined]
        period_start=row.period_start,  # type: ignore[attr-defined]
        period_end=row.period_end,  # type: ignore[attr-defined]
        generated_at=row.generated_at,  # type: ignore[attr-defined]
    )


class InsightStore:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get_latest_insight(self, user_id: str) -> InsightRecord | None:
        async with translate_db_errors("get_latest_insight"), self._session_factory() as db:
            result = await db.execute(_GET_INSIGHT_SQL, {"user_id": user_id})
            row = result.fetchone()
        return _row_to_insight(row) if row else None

    async def save_insight(self, record: InsightRecord) -> InsightRecord:
        params = {
            "user_id": record.user_id,
            "insights": record.insights,
            "suggestions": json.dumps(record.suggestions),
            "flags": json.dumps(record.flags),
            "period_start": record.period_start,
            "period_end": record.period_end,
            "generated_at": record.generated_at,
        }
        async with translate_db_errors("save_insight"), self._session_factory() as db:
            async with db.begin():
                result = await db.execute(_UPSERT_INSIGHT_SQL, params)
                row = result.fetchone()
        return _row_to_insight(row)
