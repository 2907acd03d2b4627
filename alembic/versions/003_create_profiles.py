"""003: create profiles table

Revision ID: 003
Revises: 002
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "003"
down_revision: Union[str, None] = "002"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE profiles (
            id              UUID            PRIMARY KEY REFERENCES users(id) ON DELETE CASCADE,
            email           VARCHAR(255)    NOT NULL,
            role            VARCHAR(10)     NOT NULL DEFAULT 'USER',
            balance         BIGINT          NOT NULL DEFAULT 0,
            name            VARCHAR(128),
            avatar_url      TEXT,
            email_public    BOOLEAN         NOT NULL DEFAULT TRUE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_profiles_role CHECK (role IN ('ADMIN', 'USER')),
            CONSTRAINT ck_profiles_balance_non_negative CHECK (balance >= 0)
        );
    """)
    op.execute("CREATE INDEX idx_profiles_email_lower ON profiles (lower(email));")
    op.execute("""
        CREATE TRIGGER trg_profiles_updated_at
            BEFORE UPDATE ON profiles
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON COLUMN profiles.balance IS 'micro-USDT (1 USDT = 1,000,000)';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS profiles CASCADE;")
