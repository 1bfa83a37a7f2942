"""Unit tests for the SQL repositories using a mocked AsyncSession."""

import uuid
from datetime import UTC, datetime
from decimal import Decimal
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.exc import IntegrityError, OperationalError

from src.ff_auth.infrastructure.persistence import UserRepository
from src.ff_common.errors import DatabaseError, UsernameExistsError
from src.ff_finance.domain.models import TransactionType
from src.ff_finance.infrastructure.persistence import FinanceStore
from src.ff_insights.domain.models import InsightRecord
from src.ff_insights.infrastructure.persistence import InsightStore


def _make_user_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", uuid.uuid4())
    row.username = kwargs.get("username", "alice")
    row.password_hash = "$2b$12$fakehash"
    row.mfa_enabled = kwargs.get("mfa_enabled", False)
    row.mfa_secret = kwargs.get("mfa_secret")
    row.token_version = kwargs.get("token_version", 0)
    row.created_at = datetime.now(UTC)
    return row


def _make_tx_row(**kwargs):
    row = MagicMock()
    row.id = kwargs.get("id", uuid.uuid4())
    row.user_id = kwargs.get("user_id", uuid.uuid4())
    row.amount = kwargs.get("amount", Decimal("12.5"))
    row.description = "coffee"
    row.category_id = uuid.uuid4()
    row.date = datetime(2024, 3, 15, tzinfo=UTC)
    row.type = kwargs.get("type", "expense")
    return row


@pytest.fixture
def db() -> MagicMock:
    session = MagicMock()
    session.execute = AsyncMock()
    session.begin.return_value.__aenter__ = AsyncMock(return_value=None)
    session.begin.return_value.__aexit__ = AsyncMock(return_value=False)
    return session


@pytest.fixture
def session_factory(db: MagicMock) -> MagicMock:
    factory = MagicMock()
    factory.return_value.__aenter__ = AsyncMock(return_value=db)
    factory.return_value.__aexit__ = AsyncMock(return_value=False)
    return factory


def _result(row=None, rows=None, scalar=None) -> MagicMock:
    result = MagicMock()
    result.fetchone.return_value = row
    result.fetchall.return_value = rows or []
    result.scalar_one_or_none.return_value = scalar
    return result


class TestUserRepository:
    async def test_get_user_maps_row(self, db, session_factory) -> None:
        row = _make_user_row(token_version=4)
        db.execute.return_value = _result(row=row)

        user = await UserRepository(session_factory).get_user(str(row.id))

        assert user is not None
        assert user.id == str(row.id)
        assert user.token_version == 4

    async def test_get_user_missing(self, db, session_factory) -> None:
        db.execute.return_value = _result(row=None)
        assert await UserRepository(session_factory).get_user(str(uuid.uuid4())) is None

    async def test_increment_returns_new_version(self, db, session_factory) -> None:
        db.execute.return_value = _result(scalar=7)
        assert await UserRepository(session_factory).increment_token_version("u") == 7

    async def test_duplicate_username_maps_to_409(self, db, session_factory) -> None:
        db.execute.side_effect = IntegrityError("INSERT", {}, Exception("uq_users_username"))
        with pytest.raises(UsernameExistsError):
            await UserRepository(session_factory).create_user("alice", "hash")

    async def test_driver_failure_is_database_error(self, db, session_factory) -> None:
        db.execute.side_effect = OperationalError("SELECT", {}, Exception("conn refused"))
        with pytest.raises(DatabaseError):
            await UserRepository(session_factory).get_user_by_username("alice")


class TestFinanceStore:
    async def test_malformed_id_is_a_miss_without_query(self, db, session_factory) -> None:
        store = FinanceStore(session_factory)
        assert await store.get_transaction("u", "not-a-uuid") is None
        assert await store.delete_goal("u", "42") is False
        db.execute.assert_not_awaited()

    async def test_list_transactions_maps_rows(self, db, session_factory) -> None:
        db.execute.return_value = _result(rows=[_make_tx_row(amount=Decimal("12.5"))])

        txs = await FinanceStore(session_factory).list_transactions("u")

        assert len(txs) == 1
        assert txs[0].amount == Decimal("12.50")
        assert txs[0].type is TransactionType.EXPENSE

    async def test_update_only_touches_whitelisted_columns(self, db, session_factory) -> None:
        tx_id = str(uuid.uuid4())
        db.execute.return_value = _result(row=_make_tx_row(id=tx_id, type="income"))

        await FinanceStore(session_factory).update_transaction(
            "u", tx_id, {"amount": Decimal("3.00"), "type": TransactionType.INCOME}
        )

        sql, params = db.execute.await_args.args
        assert "SET amount = :amount, type = :type" in str(sql)
        assert params["type"] == "income"
        assert params["id"] == tx_id

    async def test_spending_summary(self, db, session_factory) -> None:
        row = MagicMock()
        row.category = "Dining"
        row.amount = Decimal("15")
        db.execute.return_value = _result(rows=[row])

        items = await FinanceStore(session_factory).spending_by_category("u")

        assert [(i.category, i.amount) for i in items] == [("Dining", Decimal("15.00"))]


class TestInsightStore:
    async def test_save_serializes_lists_and_reads_jsonb_text(self, db, session_factory) -> None:
        now = datetime.now(UTC)
        record = InsightRecord(
            user_id=str(uuid.uuid4()),
            insights="ok",
            suggestions=["a"],
            flags=[],
            period_start=now,
            period_end=now,
            generated_at=now,
        )
        row = MagicMock()
        row.user_id = record.user_id
        row.insights = "ok"
        row.suggestions = '["a"]'
        row.flags = []
        row.period_start = row.period_end = row.generated_at = now
        db.execute.return_value = _result(row=row)

        saved = await InsightStore(session_factory).save_insight(record)

        _, params = db.execute.await_args.args
        assert params["suggestions"] == '["a"]'
        assert saved == record
