"""006: create follows table

Revision ID: 006
Revises: 005
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "006"
down_revision: Union[str, None] = "005"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE follows (
            follower_id     UUID            NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            following_id    UUID            NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT pk_follows PRIMARY KEY (follower_id, following_id),
            CONSTRAINT ck_follows_not_self CHECK (follower_id <> following_id)
        );
    """)
    op.execute("CREATE INDEX idx_follows_following ON follows (following_id);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS follows CASCADE;")
