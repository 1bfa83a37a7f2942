"""Unit tests for calendar bucketing and zero-filled trend windows."""

from datetime import date, datetime, timezone
from decimal import Decimal

import pytest

from src.ff_finance.domain.models import Transaction, TransactionType, TrendInterval
from src.ff_finance.domain.trends import (
    DEFAULT_LIMITS,
    aggregate_trends,
    bucket_key,
    recent_bucket_keys,
    week_start,
)

# Friday
NOW = datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)


def _tx(when: datetime, amount: str, kind: TransactionType) -> Transaction:
    return Transaction(
        id="t",
        user_id="u",
        amount=Decimal(amount),
        description="x",
        category_id="c",
        date=when,
        type=kind,
    )


class TestBuckets:
    def test_week_starts_on_sunday(self) -> None:
        assert week_start(date(2024, 3, 15)) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 10)) == date(2024, 3, 10)
        assert week_start(date(2024, 3, 9)) == date(2024, 3, 3)

    def test_monthly_key_is_first_of_month(self) -> None:
        assert bucket_key(NOW, TrendInterval.MONTHLY) == date(2024, 3, 1)

    def test_naive_datetime_treated_as_utc(self) -> None:
        assert bucket_key(datetime(2024, 3, 15, 23, 59), TrendInterval.DAILY) == date(2024, 3, 15)

    def test_monthly_window_crosses_year_boundary(self) -> None:
        keys = recent_bucket_keys(NOW, TrendInterval.MONTHLY, 14)
        assert keys[0] == date(2023, 2, 1)
        assert keys[-1] == date(2024, 3, 1)
        assert date(2024, 1, 1) in keys

    def test_default_limits(self) -> None:
        assert DEFAULT_LIMITS == {
            TrendInterval.DAILY: 30,
            TrendInterval.WEEKLY: 12,
            TrendInterval.MONTHLY: 12,
        }


class TestAggregate:
    def test_daily_window_is_zero_filled_and_ascending(self) -> None:
        txs = [
            _tx(datetime(2024, 3, 15, 9, tzinfo=timezone.utc), "100.00", TransactionType.INCOME),
            _tx(datetime(2024, 3, 13, 9, tzinfo=timezone.utc), "40.00", TransactionType.EXPENSE),
        ]
        points = aggregate_trends(txs, TrendInterval.DAILY, 7, NOW)

        assert len(points) == 7
        assert [p.date for p in points] == sorted(p.date for p in points)
        assert points[0].date == date(2024, 3, 9)
        assert points[-1].to_dict() == {
            "date": "2024-03-15",
            "total_income": "100.00",
            "total_expense": "0.00",
            "net_balance": "100.00",
        }
        assert points[4].to_dict()["net_balance"] == "-40.00"
        assert sum(p.total_income + p.total_expense for p in points[:4]) == Decimal("0")

    def test_no_transactions_still_yields_full_window(self) -> None:
        points = aggregate_trends([], TrendInterval.WEEKLY, 12, NOW)
        assert len(points) == 12
        assert all(p.net_balance == 0 for p in points)

    def test_weekly_split_at_sunday(self) -> None:
        txs = [
            _tx(datetime(2024, 3, 10, 0, 0, tzinfo=timezone.utc), "10.00", TransactionType.EXPENSE),
            _tx(datetime(2024, 3, 9, 23, 59, tzinfo=timezone.utc), "5.00", TransactionType.EXPENSE),
        ]
        points = aggregate_trends(txs, TrendInterval.WEEKLY, 3, NOW)
        assert [p.date for p in points] == [date(2024, 2, 25), date(2024, 3, 3), date(2024, 3, 10)]
        assert points[1].total_expense == Decimal("5.00")
        assert points[2].total_expense == Decimal("10.00")

    def test_activity_outside_window_is_ignored(self) -> None:
        txs = [_tx(datetime(2020, 1, 1, tzinfo=timezone.utc), "999.00", TransactionType.INCOME)]
        points = aggregate_trends(txs, TrendInterval.MONTHLY, 12, NOW)
        assert all(p.total_income == 0 for p in points)

    @pytest.mark.parametrize("interval", list(TrendInterval))
    def test_last_bucket_contains_now(self, interval: TrendInterval) -> None:
        points = aggregate_trends([], interval, 2, NOW)
        assert points[-1].date == bucket_key(NOW, interval)
