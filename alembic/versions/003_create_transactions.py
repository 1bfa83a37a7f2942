"""003: create transactions table

Revision ID: 003
Revises: 002
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            amount          NUMERIC(12, 2)  NOT NULL,
            description     VARCHAR(500)    NOT NULL,
            category_id     UUID            NOT NULL REFERENCES categories (id),
            date            TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            type            VARCHAR(10)     NOT NULL,
            CONSTRAINT ck_transactions_amount   CHECK (amount > 0),
            CONSTRAINT ck_transactions_type     CHECK (type IN ('income', 'expense'))
        );
    """)
    op.execute("CREATE INDEX idx_transactions_user_date ON transactions (user_id, date DESC);")
    op.execute("CREATE INDEX idx_transactions_user_category ON transactions (user_id, category_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
