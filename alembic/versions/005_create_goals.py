"""005: create goals table

Revision ID: 005
Revises: 004
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE goals (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES users (id) ON DELETE CASCADE,
            name            VARCHAR(200)    NOT NULL,
            target_amount   NUMERIC(12, 2)  NOT NULL,
            current_amount  NUMERIC(12, 2)  NOT NULL DEFAULT 0,
            deadline        TIMESTAMPTZ,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_goals_target      CHECK (target_amount > 0),
            CONSTRAINT ck_goals_current     CHECK (current_amount >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_goals_user ON goals (user_id, created_at);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS goals CASCADE;")
