"""Finance store Protocol — the source of truth behind the cache.

All per-user reads and writes take ``user_id`` so ownership is enforced at
the store: another user's row behaves exactly like a missing one.

``changes`` dicts passed to ``update_*`` hold snake_case field names of the
matching dataclass, already validated by the schema layer.
"""

from typing import Any, Protocol

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
)


class FinanceStoreProtocol(Protocol):
    # Transactions (newest first)
    async def list_transactions(self, user_id: str) -> list[Transaction]: ...

    async def get_transaction(self, user_id: str, tx_id: str) -> Transaction | None: ...

    async def create_transaction(self, data: NewTransaction) -> Transaction: ...

    async def update_transaction(
        self, user_id: str, tx_id: str, changes: dict[str, Any]
    ) -> Transaction | None: ...

    async def delete_transaction(self, user_id: str, tx_id: str) -> bool: ...

    # Budgets
    async def list_budgets(self, user_id: str) -> list[Budget]: ...

    async def get_budget(self, user_id: str, budget_id: str) -> Budget | None: ...

    async def create_budget(self, data: NewBudget) -> Budget: ...

    async def update_budget(
        self, user_id: str, budget_id: str, changes: dict[str, Any]
    ) -> Budget | None: ...

    async def delete_budget(self, user_id: str, budget_id: str) -> bool: ...

    # Goals
    async def list_goals(self, user_id: str) -> list[Goal]: ...

    async def get_goal(self, user_id: str, goal_id: str) -> Goal | None: ...

    async def create_goal(self, data: NewGoal) -> Goal: ...

    async def update_goal(
        self, user_id: str, goal_id: str, changes: dict[str, Any]
    ) -> Goal | None: ...

    async def delete_goal(self, user_id: str, goal_id: str) -> bool: ...

    # Categories (global)
    async def list_categories(self) -> list[Category]: ...

    async def get_category(self, category_id: str) -> Category | None: ...

    async def create_category(self, data: NewCategory) -> Category: ...

    # Aggregates
    async def spending_by_category(self, user_id: str) -> list[SpendingSummaryItem]: ...
