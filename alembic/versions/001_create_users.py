"""001: create users table (with pgcrypto and the shared updated_at trigger)

Revision ID: 001
Revises:
Create Date: 2026-10-16
"""
from typing import Sequence, Union
from alembic import op

revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # gen_random_uuid() for every table's primary key
    op.execute("CREATE EXTENSION IF NOT EXISTS pgcrypto;")
    op.execute("""
        CREATE OR REPLACE FUNCTION fn_touch_updated_at()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at := NOW();
            RETURN NEW;
        END;
        $$ LANGUAGE plpgsql;
    """)
    op.execute("""
        CREATE TABLE users (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            username        VARCHAR(64)     NOT NULL,
            password_hash   VARCHAR(255)    NOT NULL,
            mfa_enabled     BOOLEAN         NOT NULL DEFAULT FALSE,
            mfa_secret      VARCHAR(64),
            token_version   INTEGER         NOT NULL DEFAULT 0,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT uq_users_username        UNIQUE (username),
            CONSTRAINT ck_users_username_len    CHECK (LENGTH(username) >= 3),
            CONSTRAINT ck_users_token_version   CHECK (token_version >= 0),
            CONSTRAINT ck_users_mfa_secret      CHECK (NOT mfa_enabled OR mfa_secret IS NOT NULL)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_users_updated_at
            BEFORE UPDATE ON users
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute("COMMENT ON COLUMN users.token_version IS 'Bumped on logout-all; tokens carrying an older value are revoked';")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS users CASCADE;")
    op.execute("DROP FUNCTION IF EXISTS fn_touch_updated_at();")
