"""InsightQueue — in-process background queue for AI insight generation.

request():
  fresh record (younger than the freshness window)  -> "cached"
  a job for this user already waiting               -> that job's token
  otherwise                                         -> enqueue, return new token

Jobs run one at a time on a single drain task. The ``_processing`` flag is
checked and set without an intervening await, so concurrent request() calls
can never start a second drain. The guarantee is per process only; several
server processes may each generate an insight for the same user, which the
freshness window makes harmless.

A failed job is logged and dropped; the user's previous record (if any)
stays in place.
"""

import asyncio
import logging
import uuid
from collections import defaultdict, deque
from collections.abc import Callable
from datetime import datetime, timedelta
from decimal import Decimal

from src.ff_common.datetime_utils import ensure_utc, utc_now
from src.ff_common.errors import ValidationError
from src.ff_common.money import ZERO
from src.ff_finance.application.service import FinanceRepository
from src.ff_finance.domain.models import TransactionType
from src.ff_insights.application.adapter import InsightsAdapterProtocol
from src.ff_insights.domain.models import (
    CategoryBreakdown,
    InsightJob,
    InsightRecord,
    InsightRequest,
    InsightSummary,
)
from src.ff_insights.domain.repository import InsightStoreProtocol

logger = logging.getLogger("ff.insights")

CACHED = "cached"


class InsightQueue:
    def __init__(
        self,
        store: InsightStoreProtocol,
        finance: FinanceRepository,
        adapter: InsightsAdapterProtocol,
        freshness_hours: int = 24,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._finance = finance
        self._adapter = adapter
        self._freshness = timedelta(hours=freshness_hours)
        self._clock = clock
        self._jobs: deque[InsightJob] = deque()
        self._pending: dict[str, str] = {}  # user_id -> token of its queued job
        self._processing = False
        self._task: asyncio.Task[None] | None = None

    @property
    def pending_count(self) -> int:
        return len(self._jobs)

    async def request(self, user_id: str, period_start: datetime, period_end: datetime) -> str:
        if period_end < period_start:
            raise ValidationError("startDate must not be after endDate")

        latest = await self._store.get_latest_insight(user_id)
        if latest is not None and self._clock() - ensure_utc(latest.generated_at) < self._freshness:
            return CACHED

        if user_id in self._pending:
            return self._pending[user_id]

        token = uuid.uuid4().hex
        self._jobs.append(InsightJob(token, user_id, ensure_utc(period_start), ensure_utc(period_end)))
        self._pending[user_id] = token
        self._start_drain()
        return token

    async def get(self, user_id: str) -> InsightRecord | None:
        return await self._store.get_latest_insight(user_id)

    async def wait_idle(self) -> None:
        """Return once no drain task is running."""
        while self._task is not None and not self._task.done():
            await self._task

    def _start_drain(self) -> None:
        if self._processing:
            return
        self._processing = True
        self._task = asyncio.create_task(self._drain())

    async def _drain(self) -> None:
        try:
            while self._jobs:
                job = self._jobs.popleft()
                try:
                    await self._process(job)
                except Exception:
                    logger.exception("Insight job %s failed for user %s", job.token, job.user_id)
                finally:
                    self._pending.pop(job.user_id, None)
        finally:
            self._processing = False

    async def _process(self, job: InsightJob) -> None:
        logger.info("Processing insight job %s for user %s", job.token, job.user_id)
        summary = await self._summarize(job)
        response = await self._adapter.generate_insights(InsightRequest(summary=summary))

        generated_at = response.generated_at or self._clock()
        await self._store.save_insight(
            InsightRecord(
                user_id=job.user_id,
                insights=response.insights,
                suggestions=list(response.suggestions),
                flags=list(response.flags),
                period_start=job.period_start,
                period_end=job.period_end,
                generated_at=ensure_utc(generated_at),
            )
        )
        logger.info("Insight stored for user %s", job.user_id)

    async def _summarize(self, job: InsightJob) -> InsightSummary:
        """Totals and per-category expense breakdown of the transactions inside the window."""
        transactions = [
            tx
            for tx in await self._finance.get_transactions(job.user_id)
            if job.period_start <= ensure_utc(tx.date) <= job.period_end
        ]
        names = {c.id: c.name for c in await self._finance.get_categories()}

        income = ZERO
        expenses = ZERO
        totals: dict[str, Decimal] = defaultdict(lambda: ZERO)
        counts: dict[str, int] = defaultdict(int)
        for tx in transactions:
            if tx.type is TransactionType.INCOME:
                income += tx.amount
                continue
            expenses += tx.amount
            name = names.get(tx.category_id, tx.category_id)
            totals[name] += tx.amount
            counts[name] += 1

        breakdown = [
            CategoryBreakdown(category=name, total=total, count=counts[name])
            for name, total in sorted(totals.items(), key=lambda kv: kv[1], reverse=True)
        ]
        return InsightSummary(
            total_income=income,
            total_expenses=expenses,
            category_breakdown=breakdown,
            transaction_count=len(transactions),
            period_start=job.period_start,
            period_end=job.period_end,
        )
