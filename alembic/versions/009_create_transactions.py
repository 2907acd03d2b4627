"""009: create transactions table

Revision ID: 009
Revises: 008
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "009"
down_revision: Union[str, None] = "008"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE transactions (
            id              UUID            PRIMARY KEY DEFAULT gen_random_uuid(),
            user_id         UUID            NOT NULL REFERENCES profiles(id) ON DELETE CASCADE,
            kind            VARCHAR(10)     NOT NULL,
            amount          BIGINT          NOT NULL,
            status          VARCHAR(10)     NOT NULL,
            balance_after   BIGINT          NOT NULL,
            network         VARCHAR(10),
            post_id         UUID            REFERENCES posts(id) ON DELETE SET NULL,
            tx_hash         VARCHAR(128),
            created_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            updated_at      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_transactions_kind CHECK (
                kind IN ('DEPOSIT', 'WITHDRAW', 'AD_SPEND', 'EARNING')
            ),
            CONSTRAINT ck_transactions_status CHECK (
                status IN ('PENDING', 'COMPLETED', 'REJECTED')
            ),
            CONSTRAINT ck_transactions_network CHECK (
                network IS NULL OR network IN ('ERC20', 'TRC20', 'BEP20')
            ),
            CONSTRAINT ck_transactions_amount_positive CHECK (amount > 0),
            CONSTRAINT ck_transactions_balance_after CHECK (balance_after >= 0)
        );
    """)
    op.execute(
        "CREATE INDEX idx_transactions_user ON transactions (user_id, created_at DESC, id DESC);"
    )
    op.execute("""
        CREATE INDEX idx_transactions_pending_withdrawals
            ON transactions (created_at)
            WHERE kind = 'WITHDRAW' AND status = 'PENDING';
    """)
    op.execute("""
        CREATE TRIGGER trg_transactions_updated_at
            BEFORE UPDATE ON transactions
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    op.execute(
        "COMMENT ON COLUMN transactions.amount IS 'micro-USDT, direction implied by kind';"
    )


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS transactions CASCADE;")
