"""005: create comments table

Revision ID: 005
Revises: 004
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "005"
down_revision: Union[str, None] = "004"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE comments (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            post_id         UUID            NOT NULL REFERENCES posts(id) ON DELETE CASCADE,
            user_id         UUID            NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            content         TEXT            NOT NULL,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW()
        );
    """)
    op.execute("CREATE INDEX idx_comments_post ON comments (post_id, created_at);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS comments CASCADE;")
