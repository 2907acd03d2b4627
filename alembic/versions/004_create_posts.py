"""004: create posts table

Revision ID: 004
Revises: 003
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "004"
down_revision: Union[str, None] = "003"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE posts (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            content         TEXT            NOT NULL,
            type            VARCHAR(10)     NOT NULL DEFAULT 'text',
            views           BIGINT          NOT NULL DEFAULT 0,
            likes           BIGINT          NOT NULL DEFAULT 0,
            hearts          BIGINT          NOT NULL DEFAULT 0,
            hahas           BIGINT          NOT NULL DEFAULT 0,
            sponsored       BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_posts_type CHECK (type IN ('text', 'link')),
            CONSTRAINT ck_posts_counters_non_negative CHECK (
                views >= 0 AND likes >= 0 AND hearts >= 0 AND hahas >= 0
            )
        );
    """)
    op.execute("CREATE INDEX idx_posts_feed ON posts (created_at DESC, id DESC);")
    op.execute("CREATE INDEX idx_posts_user ON posts (user_id, created_at DESC, id DESC);")
    op.execute("""
        CREATE TRIGGER trg_posts_updated_at
            BEFORE UPDATE ON posts
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS posts CASCADE;")
