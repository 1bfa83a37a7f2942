"""FinanceRepository SQL backend — PostgreSQL implementation of FinanceStoreProtocol.

Every per-user statement filters on ``user_id`` so ownership is enforced in
SQL. Ids arriving from URLs are checked for UUID shape first; a malformed id
is a plain miss instead of a cast error.

Transaction ownership: each method opens its own session; writes commit via
``async with db.begin()``.
"""

import uuid
from collections.abc import Mapping
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker
from sqlalchemy.sql.elements import TextClause

from src.ff_common.database import translate_db_errors
from src.ff_common.money import to_amount
from src.ff_finance.domain.models import (
    Budget,
    BudgetPeriod,
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

# ---------------------------------------------------------------------------
# SQL: transactions
# ---------------------------------------------------------------------------

_TX_COLUMNS = "id, user_id, amount, description, category_id, date, type"

_LIST_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY date DESC, id
""")

_GET_TX_SQL = text(f"""
    SELECT {_TX_COLUMNS}
    FROM transactions
    WHERE id = CAST(:id AS UUID) AND user_id = CAST(:user_id AS UUID)
""")

_INSERT_TX_SQL = text(f"""
    INSERT INTO transactions (user_id, amount, description, category_id, date, type)
    VALUES (CAST(:user_id AS UUID), :amount, :description,
            CAST(:category_id AS UUID), :date, :type)
    RETURNING {_TX_COLUMNS}
""")

_DELETE_TX_SQL = text("""
    DELETE FROM transactions
    WHERE id = CAST(:id AS UUID) AND user_id = CAST(:user_id AS UUID)
    RETURNING id
""")

# ---------------------------------------------------------------------------
# SQL: budgets
# ---------------------------------------------------------------------------

_BUDGET_COLUMNS = "id, user_id, category_id, amount, period, month, year"

_LIST_BUDGETS_SQL = text(f"""
    SELECT {_BUDGET_COLUMNS}
    FROM budgets
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY year DESC, month DESC NULLS LAST, id
""")

_GET_BUDGET_SQL = text(f"""
    SELECT {_BUDGET_COLUMNS}
    FROM budgets
    WHERE id = CAST(:id AS UUID) AND user_id = CAST(:user_id AS UUID)
""")

_INSERT_BUDGET_SQL = text(f"""
    INSERT INTO budgets (user_id, category_id, amount, period, month, year)
    VALUES (CAST(:user_id AS UUID), CAST(:category_id AS UUID), :amount,
            :period, :month, :year)
    RETURNING {_BUDGET_COLUMNS}
""")

_DELETE_BUDGET_SQL = text("""
    DELETE FROM budgets
    WHERE id = CAST(:id AS UUID) AND user_id = CAST(:user_id AS UUID)
    RETURNING id
""")

# ---------------------------------------------------------------------------
# SQL: goals
# ---------------------------------------------------------------------------

_GOAL_COLUMNS = "id, user_id, name, target_amount, current_amount, deadline, created_at"

_LIST_GOALS_SQL = text(f"""
    SELECT {_GOAL_COLUMNS}
    FROM goals
    WHERE user_id = CAST(:user_id AS UUID)
    ORDER BY created_at, id
""")

_GET_GOAL_SQL = text(f"""
    SELECT {_GOAL_COLUMNS}
    FROM goals
    WHERE id = CAST(:id AS UUID) AND user_id = CAST(:user_id AS UUID)
""")

_INSERT_GOAL_SQL = text(f"""
    INSERT INTO goals (user_id, name, target_amount, current_amount, deadline)
    VALUES (CAST(:user_id AS UUID), :name, :target_amount, :current_amount, :deadline)
    RETURNING {_GOAL_COLUMNS}
""")

_DELETE_GOAL_SQL = text("""
    DELETE FROM goals
    WHERE id = CAST(:id AS UUID) AND user_id = CAST(:user_id AS UUID)
    RETURNING id
""")

# ---------------------------------------------------------------------------
# SQL: categories + aggregates
# ---------------------------------------------------------------------------

_LIST_CATEGORIES_SQL = text("SELECT id, name, icon, color FROM categories ORDER BY name")

_GET_CATEGORY_SQL = text(
    "SELECT id, name, icon, color FROM categories WHERE id = CAST(:id AS UUID)"
)

_INSERT_CATEGORY_SQL = text("""
    INSERT INTO categories (name, icon, color)
    VALUES (:name, :icon, :color)
    RETURNING id, name, icon, color
""")

_SPENDING_BY_CATEGORY_SQL = text("""
    SELECT c.name AS category, SUM(t.amount) AS amount
    FROM transactions t
    JOIN categories c ON t.category_id = c.id
    WHERE t.user_id = CAST(:user_id AS UUID)
      AND t.type = 'expense'
    GROUP BY c.id, c.name
    ORDER BY amount DESC
""")

# Updatable fields -> column names. Only these ever reach the SET clause.
_TX_UPDATABLE = {
    "amount": "amount",
    "description": "description",
    "category_id": "category_id",
    "date": "date",
    "type": "type",
}
_BUDGET_UPDATABLE = {
    "category_id": "category_id",
    "amount": "amount",
    "period": "period",
    "month": "month",
    "year": "year",
}
_GOAL_UPDATABLE = {
    "name": "name",
    "target_amount": "target_amount",
    "current_amount": "current_amount",
    "deadline": "deadline",
}
_UUID_COLUMNS = {"category_id"}


def _is_uuid(value: str) -> bool:
    try:
        uuid.UUID(value)
    except (ValueError, TypeError):
        return False
    return True


def _build_update_sql(table: str, columns: str, allowed: Mapping[str, str], changes: dict[str, Any]) -> TextClause:
    assignments = []
    for field in changes:
        column = allowed[field]
        if field in _UUID_COLUMNS:
            assignments.append(f"{column} = CAST(:{field} AS UUID)")
        else:
            assignments.append(f"{column} = :{field}")
    return text(f"""
        UPDATE {table}
        SET {", ".join(assignments)}
        WHERE id = CAST(:id AS UUID) AND user_id = CAST(:user_id AS UUID)
        RETURNING {columns}
    """)


def _bind(changes: dict[str, Any]) -> dict[str, Any]:
    """Enum members -> their string value for the driver."""
    return {k: (v.value if isinstance(v, (TransactionType, BudgetPeriod)) else v) for k, v in changes.items()}


def _row_to_transaction(row: object) -> Transaction:
    return Transaction(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        amount=to_amount(row.amount),  # type: ignore[attr-defined]
        description=row.description,  # type: ignore[attr-defined]
        category_id=str(row.category_id),  # type: ignore[attr-defined]
        date=row.date,  # type: ignore[attr-defined]
        type=TransactionType(row.type),  # type: ignore[attr-defined]
    )


def _row_to_budget(row: object) -> Budget:
    return Budget(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        category_id=str(row.category_id),  # type: ignore[attr-defined]
        amount=to_amount(row.amount),  # type: ignore[attr-defined]
        period=BudgetPeriod(row.period),  # type: ignore[attr-defined]
        month=row.month,  # type: ignore[attr-defined]
        year=row.year,  # type: ignore[attr-defined]
    )


def _row_to_goal(row: object) -> Goal:
    return Goal(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        target_amount=to_amount(row.target_amount),  # type: ignore[attr-defined]
        current_amount=to_amount(row.current_amount),  # type: ignore[attr-defined]
        deadline=row.deadline,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


def _row_to_category(row: object) -> Category:
    return Category(
        id=str(row.id),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        icon=row.icon,  # type: ignore[attr-defined]
        color=row.color,  # type: ignore[attr-defined]
    )


class FinanceStore:
    """Concrete SQL store."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def _fetch_all(self, operation: str, sql: TextClause, params: dict[str, Any]) -> list[Any]:
        async with translate_db_errors(operation), self._session_factory() as db:
            result = await db.execute(sql, params)
            return list(result.fetchall())

    async def _fetch_one(self, operation: str, sql: TextClause, params: dict[str, Any]) -> Any | None:
        async with translate_db_errors(operation), self._session_factory() as db:
            result = await db.execute(sql, params)
            return result.fetchone()

    async def _write_one(self, operation: str, sql: TextClause, params: dict[str, Any]) -> Any | None:
        async with translate_db_errors(operation), self._session_factory() as db:
            async with db.begin():
                result = await db.execute(sql, params)
                return result.fetchone()

    # ------------------------------------------------------------------
    # Transactions
    # ------------------------------------------------------------------

    async def list_transactions(self, user_id: str) -> list[Transaction]:
        rows = await self._fetch_all("list_transactions", _LIST_TX_SQL, {"user_id": user_id})
        return [_row_to_transaction(r) for r in rows]

    async def get_transaction(self, user_id: str, tx_id: str) -> Transaction | None:
        if not _is_uuid(tx_id):
            return None
        row = await self._fetch_one("get_transaction", _GET_TX_SQL, {"id": tx_id, "user_id": user_id})
        return _row_to_transaction(row) if row else None

    async def create_transaction(self, data: NewTransaction) -> Transaction:
        row = await self._write_one("create_transaction", _INSERT_TX_SQL, _bind(vars(data)))
        return _row_to_transaction(row)

    async def update_transaction(
        self, user_id: str, tx_id: str, changes: dict[str, Any]
    ) -> Transaction | None:
        if not _is_uuid(tx_id):
            return None
        if not changes:
            return await self.get_transaction(user_id, tx_id)
        sql = _build_update_sql("transactions", _TX_COLUMNS, _TX_UPDATABLE, changes)
        row = await self._write_one(
            "update_transaction", sql, {**_bind(changes), "id": tx_id, "user_id": user_id}
        )
        return _row_to_transaction(row) if row else None

    async def delete_transaction(self, user_id: str, tx_id: str) -> bool:
        if not _is_uuid(tx_id):
            return False
        row = await self._write_one("delete_transaction", _DELETE_TX_SQL, {"id": tx_id, "user_id": user_id})
        return row is not None

    # ------------------------------------------------------------------
    # Budgets
    # ------------------------------------------------------------------

    async def list_budgets(self, user_id: str) -> list[Budget]:
        rows = await self._fetch_all("list_budgets", _LIST_BUDGETS_SQL, {"user_id": user_id})
        return [_row_to_budget(r) for r in rows]

    async def get_budget(self, user_id: str, budget_id: str) -> Budget | None:
        if not _is_uuid(budget_id):
            return None
        row = await self._fetch_one("get_budget", _GET_BUDGET_SQL, {"id": budget_id, "user_id": user_id})
        return _row_to_budget(row) if row else None

    async def create_budget(self, data: NewBudget) -> Budget:
        row = await self._write_one("create_budget", _INSERT_BUDGET_SQL, _bind(vars(data)))
        return _row_to_budget(row)

    async def update_budget(
        self, user_id: str, budget_id: str, changes: dict[str, Any]
    ) -> Budget | None:
        if not _is_uuid(budget_id):
            return None
        if not changes:
            return await self.get_budget(user_id, budget_id)
        sql = _build_update_sql("budgets", _BUDGET_COLUMNS, _BUDGET_UPDATABLE, changes)
        row = await self._write_one(
            "update_budget", sql, {**_bind(changes), "id": budget_id, "user_id": user_id}
        )
        return _row_to_budget(row) if row else None

    async def delete_budget(self, user_id: str, budget_id: str) -> bool:
        if not _is_uuid(budget_id):
            return False
        row = await self._write_one(
            "delete_budget", _DELETE_BUDGET_SQL, {"id": budget_id, "user_id": user_id}
        )
        return row is not None

    # ------------------------------------------------------------------
    # Goals
    # ------------------------------------------------------------------

    async def list_goals(self, user_id: str) -> list[Goal]:
        rows = await self._fetch_all("list_goals", _LIST_GOALS_SQL, {"user_id": user_id})
        return [_row_to_goal(r) for r in rows]

    async def get_goal(self, user_id: str, goal_id: str) -> Goal | None:
        if not _is_uuid(goal_id):
            return None
        row = await self._fetch_one("get_goal", _GET_GOAL_SQL, {"id": goal_id, "user_id": user_id})
        return _row_to_goal(row) if row else None

    async def create_goal(self, data: NewGoal) -> Goal:
        row = await self._write_one("create_goal", _INSERT_GOAL_SQL, vars(data))
        return _row_to_goal(row)

    async def update_goal(
        self, user_id: str, goal_id: str, changes: dict[str, Any]
    ) -> Goal | None:
        if not _is_uuid(goal_id):
            return None
        if not changes:
            return await self.get_goal(user_id, goal_id)
        sql = _build_update_sql("goals", _GOAL_COLUMNS, _GOAL_UPDATABLE, changes)
        row = await self._write_one(
            "update_goal", sql, {**changes, "id": goal_id, "user_id": user_id}
        )
        return _row_to_goal(row) if row else None

    async def delete_goal(self, user_id: str, goal_id: str) -> bool:
        if not _is_uuid(goal_id):
            return False
        row = await self._write_one("delete_goal", _DELETE_GOAL_SQL, {"id": goal_id, "user_id": user_id})
        return row is not None

    # ------------------------------------------------------------------
    # Categories
    # ------------------------------------------------------------------

    async def list_categories(self) -> list[Category]:
        rows = await self._fetch_all("list_categories", _LIST_CATEGORIES_SQL, {})
        return [_row_to_category(r) for r in rows]

    async def get_category(self, category_id: str) -> Category | None:
        if not _is_uuid(category_id):
            return None
        row = await self._fetch_one("get_category", _GET_CATEGORY_SQL, {"id": category_id})
        return _row_to_category(row) if row else None

    async def create_category(self, data: NewCategory) -> Category:
        row = await self._write_one("create_category", _INSERT_CATEGORY_SQL, vars(data))
        return _row_to_category(row)

    # ------------------------------------------------------------------
    # Aggregates
    # ------------------------------------------------------------------

    async def spending_by_category(self, user_id: str) -> list[SpendingSummaryItem]:
        rows = await self._fetch_all(
            "spending_by_category", _SPENDING_BY_CATEGORY_SQL, {"user_id": user_id}
        )
        return [
            SpendingSummaryItem(category=r.category, amount=to_amount(r.amount))
            for r in rows
        ]
