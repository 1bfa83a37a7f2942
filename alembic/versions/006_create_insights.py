"""006: create insights table (latest AI insight per user)

Revision ID: 006
Revises: 005
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE insights (
            user_id         UUID            PRIMARY KEY REFERENCES users (id) ON DELETE CASCADE,
            insights        TEXT            NOT NULL,
            suggestions     JSONB           NOT NULL DEFAULT '[]'::jsonb,
            flags           JSONB           NOT NULL DEFAULT '[]'::jsonb,
            period_start    TIMESTAMPTZ     NOT NULL,
            period_end      TIMESTAMPTZ     NOT NULL,
            generated_at    TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS insights CASCADE;")
