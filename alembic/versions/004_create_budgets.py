"""004: create budgets table

Revision ID: 004
Revises: 003
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE budgets (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            category_id     UUID            NOT NULL REFERENCES categories (id),
            amount          NUMERIC(12, 2)  NOT NULL,
            period          VARCHAR(10)     NOT NULL,
            month           SMALLINT,
            year            SMALLINT        NOT NULL,
            CONSTRAINT ck_budgets_amount    CHECK (amount > 0),
            CONSTRAINT ck_budgets_period    CHECK (period IN ('monthly', 'yearly')),
            CONSTRAINT ck_budgets_month     CHECK (month IS NULL OR month BETWEEN 1 AND 12)
        );
    """)
    op.execute("CREATE INDEX idx_budgets_user ON budgets (user_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS budgets CASCADE;")
