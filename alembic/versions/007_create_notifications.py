"""007: create notifications table

Revision ID: 007
Revises: 006
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "007"
down_revision: Union[str, None] = "006"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE notifications (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            actor_id        UUID            REFERENCES profiles(id) ON DELETE SET NULL,
            type            VARCHAR(10)     NOT NULL,
            message         TEXT            NOT NULL,
            link            TEXT,
            is_read         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_notifications_type CHECK (
                type IN ('LIKE', 'COMMENT', 'FOLLOW', 'SYSTEM')
            )
        );
    """)
    op.execute(
        "CREATE INDEX idx_notifications_user ON notifications (user_id, created_at DESC);"
    )
    op.execute(
        "CREATE INDEX idx_notifications_unread ON notifications (user_id) WHERE is_read = FALSE;"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS notifications CASCADE;")
