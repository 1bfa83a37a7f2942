"""In-memory FinanceStore for local dev and tests (DATABASE_URL unset).

Returns copies so callers can never mutate stored rows in place.
"""

import uuid
from dataclasses import replace
from decimal import Decimal
from typing import Any

from src.ff_common.datetime_utils import utc_now
from src.ff_common.money import ZERO
from src.ff_finance.domain.constants import DEFAULT_CATEGORIES
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
    TransactionType,
)


def _new_id() -> str:
    return str(uuid.uuid4())


class InMemoryFinanceStore:
    def __init__(self, seed_categories: bool = True) -> None:
        self._transactions: dict[str, Transaction] = {}
        self._budgets: dict[str, Budget] = {}
        self._goals: dict[str, Goal] = {}
        self._categories: dict[str, Category] = {}
        if seed_categories:
            for cat in DEFAULT_CATEGORIES:
                category = Category(id=_new_id(), **cat)
                self._categories[category.id] = category

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        rows = [replace(t) for t in self._transactions.values() if t.user_id == user_id]
        return sorted(rows, key=lambda t: t.date, reverse=True)

    async def get_transaction(self, user_id: str, tx_id: str) -> Transaction | None:
        tx = self._transactions.get(tx_id)
        return replace(tx) if tx and tx.user_id == user_id else None

    async def create_transaction(self, data: NewTransaction) -> Transaction:
        tx = Transaction(id=_new_id(), **vars(data))
        self._transactions[tx.id] = tx
        return replace(tx)

    async def update_transaction(
        self, user_id: str, tx_id: str, changes: dict[str, Any]
    ) -> Transaction | None:
        existing = await self.get_transaction(user_id, tx_id)
        if existing is None:
            return None
        updated = replace(existing, **changes)
        self._transactions[tx_id] = updated
        return replace(updated)

    async def delete_transaction(self, user_id: str, tx_id: str) -> bool:
        if await self.get_transaction(user_id, tx_id) is None:
            return False
        del self._transactions[tx_id]
        return True

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    async def list_budgets(self, user_id: str) -> list[Budget]:
        return [replace(b) for b in self._budgets.values() if b.user_id == user_id]

    async def get_budget(self, user_id: str, budget_id: str) -> Budget | None:
        budget = self._budgets.get(budget_id)
        return replace(budget) if budget and budget.user_id == user_id else None

    async def create_budget(self, data: NewBudget) -> Budget:
        budget = Budget(id=_new_id(), **vars(data))
        self._budgets[budget.id] = budget
        return replace(budget)

    async def update_budget(
        self, user_id: str, budget_id: str, changes: dict[str, Any]
    ) -> Budget | None:
        existing = await self.get_budget(user_id, budget_id)
        if existing is None:
            return None
        updated = replace(existing, **changes)
        self._budgets[budget_id] = updated
        return replace(updated)

    async def delete_budget(self, user_id: str, budget_id: str) -> bool:
        if await self.get_budget(user_id, budget_id) is None:
            return False
        del self._budgets[budget_id]
        return True

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    async def list_goals(self, user_id: str) -> list[Goal]:
        rows = [replace(g) for g in self._goals.values() if g.user_id == user_id]
        return sorted(rows, key=lambda g: g.created_at)

    async def get_goal(self, user_id: str, goal_id: str) -> Goal | None:
        goal = self._goals.get(goal_id)
        return replace(goal) if goal and goal.user_id == user_id else None

    async def create_goal(self, data: NewGoal) -> Goal:
        goal = Goal(id=_new_id(), created_at=utc_now(), **vars(data))
        self._goals[goal.id] = goal
        return replace(goal)

    async def update_goal(
        self, user_id: str, goal_id: str, changes: dict[str, Any]
    ) -> Goal | None:
        existing = await self.get_goal(user_id, goal_id)
        if existing is None:
            return None
        updated = replace(existing, **changes)
        self._goals[goal_id] = updated
        return replace(updated)

    async def delete_goal(self, user_id: str, goal_id: str) -> bool:
        if await self.get_goal(user_id, goal_id) is None:
            return False
        del self._goals[goal_id]
        return True

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        return sorted((replace(c) for c in self._categories.values()), key=lambda c: c.name)

    async def get_category(self, category_id: str) -> Category | None:
        category = self._categories.get(category_id)
        return replace(category) if category else None

    async def create_category(self, data: NewCategory) -> Category:
        category = Category(id=_new_id(), **vars(data))
        self._categories[category.id] = category
        return replace(category)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def spending_by_category(self, user_id: str) -> list[SpendingSummaryItem]:
        totals: dict[str, Decimal] = {}
        for tx in self._transactions.values():
            if tx.user_id != user_id or tx.type is not TransactionType.EXPENSE:
                continue
            totals[tx.category_id] = totals.get(tx.category_id, ZERO) + tx.amount

        items = [
            SpendingSummaryItem(category=self._categories[cat_id].name, amount=amount)
            for cat_id, amount in totals.items()
            if cat_id in self._categories
        ]
        return sorted(items, key=lambda i: i.amount, reverse=True)
