"""008: create messages table

Revision ID: 008
Revises: 007
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "008"
down_revision: Union[str, None] = "007"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE messages (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            sender_id       UUID            NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            receiver_id     UUID            NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            content         TEXT            NOT NULL,
            is_read         BOOLEAN         NOT NULL DEFAULT FALSE,
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_messages_not_self CHECK (sender_id <> receiver_id)
        );
    """)
    op.execute("CREATE INDEX idx_messages_sender ON messages (sender_id, created_at DESC);")
    op.execute("CREATE INDEX idx_messages_receiver ON messages (receiver_id, created_at DESC);")


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS messages CASCADE;")
