"""FinanceRepository — cache-through reads, invalidate-on-write mutations.

Reads: cache -> store on miss -> populate with a bounded TTL -> return.
Writes: mutate the store first; only when that succeeds, delete every cache
key the mutation affects. The cache is never patched in place; the next read
repopulates it.

Keys touched by each mutation:
  transaction create/update/delete  transactions:{uid}, spending-summary:{uid}
  budget create/update/delete       budgets:{uid}
  goal create/update/delete         goals:{uid}
  category create                   categories
"""

import csv
import io
import logging
from collections.abc import Awaitable, Callable
from datetime import datetime
from typing import Any, TypeVar

from src.ff_common.cache import CacheService
from src.ff_common.datetime_utils import utc_now
from src.ff_common.errors import NotFoundError, ValidationError
from src.ff_common.money import format_amount
from src.ff_finance.domain.models import (
    Budget,
    Category,
    Goal,
    NewBudget,
    NewCategory,
    NewGoal,
    NewTransaction,
    SpendingSummaryItem,
    Transaction,
    TrendInterval,
    TrendPoint,
)
from src.ff_finance.domain.repository import FinanceStoreProtocol
from src.ff_finance.domain.trends import aggregate_trends

logger = logging.getLogger("ff.finance")

T = TypeVar("T")

CATEGORIES_KEY = "categories"
EXPORT_HEADERS = ["Date", "Description", "Category", "Type", "Amount"]


def transactions_key(user_id: str) -> str:
    return f"transactions:{user_id}"


def budgets_key(user_id: str) -> str:
    return f"budgets:{user_id}"


def goals_key(user_id: str) -> str:
    return f"goals:{user_id}"


def spending_summary_key(user_id: str) -> str:
    return f"spending-summary:{user_id}"


class FinanceRepository:
    def __init__(
        self,
        store: FinanceStoreProtocol,
        cache: CacheService,
        ttl_seconds: int = 300,
        category_ttl_seconds: int = 3600,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._cache = cache
        self._ttl_seconds = ttl_seconds
        self._category_ttl_seconds = category_ttl_seconds
        self._clock = clock

    async def _cached_list(
        self,
        key: str,
        ttl_seconds: int,
        load: Callable[[], Awaitable[list[T]]],
        encode: Callable[[T], dict[str, Any]],
        decode: Callable[[dict[str, Any]], T],
    ) -> list[T]:
        cached = await self._cache.get(key)
        if isinstance(cached, list):
            try:
                return [decode(item) for item in cached]
            except (KeyError, TypeError, ValueError) as exc:
                # shape drift between deploys: treat as a miss
                logger.warning("Discarding undecodable cache entry %s: %s", key, exc)

        items = await load()
        await self._cache.set(key, [encode(item) for item in items], ttl_seconds)
        return items

    async def _invalidate(self, *keys: str) -> None:
        for key in keys:
            await self._cache.delete(key)

    async def _require_category(self, category_id: str) -> None:
        if await self._store.get_category(category_id) is None:
            raise ValidationError("Unknown category", {"categoryId": category_id})

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def get_transactions(self, user_id: str) -> list[Transaction]:
        return await self._cached_list(
            transactions_key(user_id),
            self._ttl_seconds,
            lambda: self._store.list_transactions(user_id),
            Transaction.to_dict,
            Transaction.from_dict,
        )

    async def get_transaction(self, user_id: str, tx_id: str) -> Transaction:
        tx = await self._store.get_transaction(user_id, tx_id)
        if tx is None:
            raise NotFoundError("Transaction", tx_id)
        return tx

    async def create_transaction(self, data: NewTransaction) -> Transaction:
        await self._require_category(data.category_id)
        tx = await self._store.create_transaction(data)
        await self._invalidate(transactions_key(data.user_id), spending_summary_key(data.user_id))
        return tx

    async def update_transaction(
        self, user_id: str, tx_id: str, changes: dict[str, Any]
    ) -> Transaction:
        if "category_id" in changes:
            await self._require_category(changes["category_id"])
        tx = await self._store.update_transaction(user_id, tx_id, changes)
        if tx is None:
            raise NotFoundError("Transaction", tx_id)
        await self._invalidate(transactions_key(user_id), spending_summary_key(user_id))
        return tx

    async def delete_transaction(self, user_id: str, tx_id: str) -> None:
        if not await self._store.delete_transaction(user_id, tx_id):
            raise NotFoundError("Transaction", tx_id)
        await self._invalidate(transactions_key(user_id), spending_summary_key(user_id))

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    async def get_budgets(self, user_id: str) -> list[Budget]:
        return await self._cached_list(
            budgets_key(user_id),
            self._ttl_seconds,
            lambda: self._store.list_budgets(user_id),
            Budget.to_dict,
            Budget.from_dict,
        )

    async def get_budget(self, user_id: str, budget_id: str) -> Budget:
        budget = await self._store.get_budget(user_id, budget_id)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        return budget

    async def create_budget(self, data: NewBudget) -> Budget:
        await self._require_category(data.category_id)
        budget = await self._store.create_budget(data)
        await self._invalidate(budgets_key(data.user_id))
        return budget

    async def update_budget(self, user_id: str, budget_id: str, changes: dict[str, Any]) -> Budget:
        if "category_id" in changes:
            await self._require_category(changes["category_id"])
        budget = await self._store.update_budget(user_id, budget_id, changes)
        if budget is None:
            raise NotFoundError("Budget", budget_id)
        await self._invalidate(budgets_key(user_id))
        return budget

    async def delete_budget(self, user_id: str, budget_id: str) -> None:
        if not await self._store.delete_budget(user_id, budget_id):
            raise NotFoundError("Budget", budget_id)
        await self._invalidate(budgets_key(user_id))

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    async def get_goals(self, user_id: str) -> list[Goal]:
        return await self._cached_list(
            goals_key(user_id),
            self._ttl_seconds,
            lambda: self._store.list_goals(user_id),
            Goal.to_dict,
            Goal.from_dict,
        )

    async def get_goal(self, user_id: str, goal_id: str) -> Goal:
        goal = await self._store.get_goal(user_id, goal_id)
        if goal is None:
            raise NotFoundError("Goal", goal_id)
        return goal

    async def create_goal(self, data: NewGoal) -> Goal:
        goal = await self._store.create_goal(data)
        await self._invalidate(goals_key(data.user_id))
        return goal

    async def update_goal(self, user_id: str, goal_id: str, changes: dict[str, Any]) -> Goal:
        goal = await self._store.update_goal(user_id, goal_id, changes)
        if goal is None:
            raise NotFoundError("Goal", goal_id)
        await self._invalidate(goals_key(user_id))
        return goal

    async def delete_goal(self, user_id: str, goal_id: str) -> None:
        if not await self._store.delete_goal(user_id, goal_id):
            raise NotFoundError("Goal", goal_id)
        await self._invalidate(goals_key(user_id))

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def get_categories(self) -> list[Category]:
        return await self._cached_list(
            CATEGORIES_KEY,
            self._category_ttl_seconds,
            self._store.list_categories,
            Category.to_dict,
            Category.from_dict,
        )

    async def create_category(self, data: NewCategory) -> Category:
        category = await self._store.create_category(data)
        await self._invalidate(CATEGORIES_KEY)
        return category

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def get_spending_summary(self, user_id: str) -> list[SpendingSummaryItem]:
        """Expense totals per category, largest first. Categories without expenses are omitted."""
        return await self._cached_list(
            spending_summary_key(user_id),
            self._ttl_seconds,
            lambda: self._store.spending_by_category(user_id),
            SpendingSummaryItem.to_dict,
            SpendingSummaryItem.from_dict,
        )

    async def get_trends(self, user_id: str, interval: TrendInterval, limit: int) -> list[TrendPoint]:
        """Exactly ``limit`` consecutive buckets ending at now, zero-filled.

        Built from the cached transaction list, so it inherits that list's
        invalidation and needs no cache key of its own.
        """
        if limit < 1:
            raise ValidationError("limit must be a positive integer")
        transactions = await self.get_transactions(user_id)
        return aggregate_trends(transactions, interval, limit, self._clock())

    async def export_csv(self, user_id: str) -> str:
        transactions = await self.get_transactions(user_id)
        names = {c.id: c.name for c in await self.get_categories()}

        buf = io.StringIO()
        writer = csv.writer(buf, quoting=csv.QUOTE_ALL, lineterminator="\n")
        writer.writerow(EXPORT_HEADERS)
        for tx in transactions:
            writer.writerow([
                tx.date.date().isoformat(),
                tx.description,
                names.get(tx.category_id, tx.category_id),
                tx.type.value,
                format_amount(tx.amount),
            ])
        return buf.getvalue()
