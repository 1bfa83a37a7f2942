"""Unit tests for the in-process insight job queue."""

from datetime import datetime, timedelta, timezone
from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from src.ff_common.cache import CacheService
from src.ff_common.errors import ValidationError
from src.ff_finance.application.service import FinanceRepository
from src.ff_finance.domain.models import NewTransaction, TransactionType
from src.ff_finance.infrastructure.memory import InMemoryFinanceStore
from src.ff_insights.application.adapter import MockInsightsAdapter, create_insights_adapter
from src.ff_insights.application.queue import CACHED, InsightQueue
from src.ff_insights.domain.models import InsightRecord, InsightResponse
from src.ff_insights.infrastructure.memory import InMemoryInsightStore

START = datetime(2024, 3, 1, tzinfo=timezone.utc)
END = datetime(2024, 3, 31, tzinfo=timezone.utc)


class Clock:
    def __init__(self, now: datetime) -> None:
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock() -> Clock:
    return Clock(datetime(2024, 4, 1, tzinfo=timezone.utc))


@pytest.fixture
def finance(clock: Clock) -> FinanceRepository:
    return FinanceRepository(InMemoryFinanceStore(), CacheService(), clock=clock)


@pytest.fixture
def store() -> InMemoryInsightStore:
    return InMemoryInsightStore()


def _queue(store, finance, clock, adapter=None) -> InsightQueue:
    return InsightQueue(store, finance, adapter or MockInsightsAdapter(), clock=clock)


async def _add_tx(finance: FinanceRepository, amount: str, kind: TransactionType, category: str, when: datetime) -> None:
    category_id = next(c.id for c in await finance.get_categories() if c.name == category)
    await finance.create_transaction(
        NewTransaction(
            user_id="u1",
            amount=Decimal(amount),
            description="x",
            category_id=category_id,
            date=when,
            type=kind,
        )
    )


class TestRequest:
    async def test_first_request_enqueues_and_stores(self, store, finance, clock) -> None:
        queue = _queue(store, finance, clock)

        token = await queue.request("u1", START, END)
        assert token != CACHED
        assert len(token) == 32

        await queue.wait_idle()
        record = await queue.get("u1")
        assert record is not None
        assert record.period_start == START

    async def test_fresh_record_returns_cached(self, store, finance, clock) -> None:
        queue = _queue(store, finance, clock)
        await queue.request("u1", START, END)
        await queue.wait_idle()

        assert await queue.request("u1", START, END) == CACHED

    async def test_stale_record_regenerates(self, store, finance, clock) -> None:
        adapter = AsyncMock()
        adapter.generate_insights.return_value = InsightResponse(
            insights="first", generated_at=clock.now
        )
        queue = _queue(store, finance, clock, adapter)
        await queue.request("u1", START, END)
        await queue.wait_idle()

        clock.now += timedelta(hours=25)
        adapter.generate_insights.return_value = InsightResponse(insights="second")
        assert await queue.request("u1", START, END) != CACHED
        await queue.wait_idle()

        record = await queue.get("u1")
        assert record.insights == "second"  # type: ignore[union-attr]
        assert record.generated_at == clock.now  # type: ignore[union-attr]

    async def test_pending_job_is_not_duplicated(self, store, finance, clock) -> None:
        adapter = AsyncMock()
        adapter.generate_insights.return_value = InsightResponse(insights="x", generated_at=clock.now)
        queue = _queue(store, finance, clock, adapter)

        first = await queue.request("u1", START, END)
        second = await queue.request("u1", START, END)
        await queue.wait_idle()

        assert first == second
        assert adapter.generate_insights.await_count == 1

    async def test_jobs_for_different_users_all_run(self, store, finance, clock) -> None:
        queue = _queue(store, finance, clock)
        tokens = {await queue.request(uid, START, END) for uid in ("u1", "u2", "u3")}
        await queue.wait_idle()

        assert len(tokens) == 3
        assert queue.pending_count == 0
        for uid in ("u1", "u2", "u3"):
            assert await queue.get(uid) is not None

    async def test_inverted_window_rejected(self, store, finance, clock) -> None:
        with pytest.raises(ValidationError):
            await _queue(store, finance, clock).request("u1", END, START)


class TestFailures:
    async def test_adapter_failure_keeps_previous_record(self, store, finance, clock) -> None:
        previous = InsightRecord(
            user_id="u1",
            insights="old",
            suggestions=[],
            flags=[],
            period_start=START,
            period_end=END,
            generated_at=clock.now - timedelta(days=3),
        )
        await store.save_insight(previous)
        adapter = AsyncMock()
        adapter.generate_insights.side_effect = RuntimeError("model down")
        queue = _queue(store, finance, clock, adapter)

        token = await queue.request("u1", START, END)
        await queue.wait_idle()

        assert token != CACHED
        assert await queue.get("u1") == previous

    async def test_failed_job_does_not_block_next(self, store, finance, clock) -> None:
        adapter = AsyncMock()
        adapter.generate_insights.side_effect = [
            RuntimeError("boom"),
            InsightResponse(insights="ok", generated_at=clock.now),
        ]
        queue = _queue(store, finance, clock, adapter)

        await queue.request("u1", START, END)
        await queue.request("u2", START, END)
        await queue.wait_idle()

        assert await queue.get("u1") is None
        assert (await queue.get("u2")).insights == "ok"  # type: ignore[union-attr]


class TestSummary:
    async def test_adapter_sees_window_totals(self, store, finance, clock) -> None:
        await _add_tx(finance, "1000.00", TransactionType.INCOME, "Income", datetime(2024, 3, 2, tzinfo=timezone.utc))
        await _add_tx(finance, "300.00", TransactionType.EXPENSE, "Dining", datetime(2024, 3, 3, tzinfo=timezone.utc))
        await _add_tx(finance, "100.00", TransactionType.EXPENSE, "Shopping", datetime(2024, 3, 4, tzinfo=timezone.utc))
        await _add_tx(finance, "999.00", TransactionType.EXPENSE, "Dining", datetime(2024, 2, 1, tzinfo=timezone.utc))

        adapter = AsyncMock(wraps=MockInsightsAdapter())
        queue = _queue(store, finance, clock, adapter)
        await queue.request("u1", START, END)
        await queue.wait_idle()

        request = adapter.generate_insights.await_args.args[0]
        summary = request.summary
        assert summary.total_income == Decimal("1000.00")
        assert summary.total_expenses == Decimal("400.00")
        assert summary.net_balance == Decimal("600.00")
        assert summary.transaction_count == 3
        assert [(c.category, c.total, c.count) for c in summary.category_breakdown] == [
            ("Dining", Decimal("300.00"), 1),
            ("Shopping", Decimal("100.00"), 1),
        ]

        record = await queue.get("u1")
        assert record.flags == ["High spend in Dining"]  # type: ignore[union-attr]


class TestAdapterFactory:
    def test_mock_provider(self) -> None:
        assert isinstance(create_insights_adapter("mock"), MockInsightsAdapter)

    def test_unknown_provider(self) -> None:
        with pytest.raises(ValueError):
            create_insights_adapter("nope")
