"""002: create categories table with default set

Revision ID: 002
Revises: 001
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "002"
down_revision: Union[str, None] = "001"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE categories (
            id      UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            name    VARCHAR(100)    NOT NULL,
            icon    VARCHAR(32),
            color   VARCHAR(7),
            CONSTRAINT uq_categories_name UNIQUE (name)
        );
    """)
    op.execute("""
        INSERT INTO categories (name, icon, color) VALUES
            ('Groceries',      '🛒', '#3b82f6'),
            ('Entertainment',  '🎬', '#10b981'),
            ('Transportation', '🚗', '#8b5cf6'),
            ('Utilities',      '💡', '#f59e0b'),
            ('Shopping',       '🛍️', '#ef4444'),
            ('Dining',         '🍽️', '#06b6d4'),
            ('Healthcare',     '⚕️', '#ec4899'),
            ('Income',         '💰', '#22c55e');
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS categories CASCADE;")
