"""Calendar-bucketed income/expense trends with zero-filled gaps.

Buckets:
  daily    UTC calendar day
  weekly   Sunday that starts the week containing the date
  monthly  first day of the calendar month

The output always has exactly ``limit`` consecutive buckets, oldest first,
the last one containing ``now``. Buckets with no activity are zero-filled so
charts never show holes.
"""

from collections.abc import Iterable
from datetime import date, datetime, timedelta
from decimal import Decimal

from src.ff_common.datetime_utils import ensure_utc
from src.ff_common.money import ZERO
from src.ff_finance.domain.models import Transaction, TransactionType, TrendInterval, TrendPoint

DEFAULT_LIMITS: dict[TrendInterval, int] = {
    TrendInterval.DAILY: 30,
    TrendInterval.WEEKLY: 12,
    TrendInterval.MONTHLY: 12,
}


def week_start(day: date) -> date:
    """Sunday on or before ``day`` (date.weekday(): Monday=0 ... Sunday=6)."""
    return day - timedelta(days=(day.weekday() + 1) % 7)


def bucket_key(moment: datetime, interval: TrendInterval) -> date:
    day = ensure_utc(moment).date()
    if interval is TrendInterval.DAILY:
        return day
    if interval is TrendInterval.WEEKLY:
        return week_start(day)
    return day.replace(day=1)


def recent_bucket_keys(now: datetime, interval: TrendInterval, limit: int) -> list[date]:
    """The ``limit`` most recent bucket keys ending at ``now``, oldest first."""
    current = bucket_key(now, interval)
    keys: list[date] = []
    for back in range(limit - 1, -1, -1):
        if interval is TrendInterval.DAILY:
            keys.append(current - timedelta(days=back))
        elif interval is TrendInterval.WEEKLY:
            keys.append(current - timedelta(weeks=back))
        else:
            months = current.year * 12 + (current.month - 1) - back
            keys.append(date(months // 12, months % 12 + 1, 1))
    return keys


def aggregate_trends(
    transactions: Iterable[Transaction],
    interval: TrendInterval,
    limit: int,
    now: datetime,
) -> list[TrendPoint]:
    # bucket key -> [income, expense]
    sums: dict[date, list[Decimal]] = {}
    for tx in transactions:
        totals = sums.setdefault(bucket_key(tx.date, interval), [ZERO, ZERO])
        if tx.type is TransactionType.INCOME:
            totals[0] += tx.amount
        else:
            totals[1] += tx.amount

    # the window is enumerated on its own so empty buckets still appear
    points: list[TrendPoint] = []
    for key in recent_bucket_keys(now, interval, limit):
        income, expense = sums.get(key, (ZERO, ZERO))
        points.append(TrendPoint(date=key, total_income=income, total_expense=expense))
    return points
