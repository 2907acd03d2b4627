"""010: create settings table with the singleton row

Revision ID: 010
Revises: 009
Create Date: 2026-10-05
"""
from typing import Sequence, Union
from alembic import op

revision: str = "010"
down_revision: Union[str, None] = "009"
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.execute("""
        CREATE TABLE settings (
            id                              INTEGER         PRIMARY KEY DEFAULT 1,
            site_name                       VARCHAR(128),
            site_logo_url                   TEXT,
            site_background_url             TEXT,
            creator_rate_per_100k    BIGINT          NOT NULL DEFAULT 100000,
            sponsor_price_per_1k     BIGINT          NOT NULL DEFAULT 1000000,
            min_withdraw             BIGINT          NOT NULL DEFAULT 50000000,
            admin_wallet_address            VARCHAR(128),
            about_content                   TEXT,
            policy_content                  TEXT,
            enable_direct_messaging         BOOLEAN         NOT NULL DEFAULT TRUE,
            updated_at                      TIMESTAMPTZ     NOT NULL DEFAULT NOW(),
            CONSTRAINT ck_settings_singleton CHECK (id = 1),
            CONSTRAINT ck_settings_creator_rate CHECK (creator_rate_per_100k >= 0),
            CONSTRAINT ck_settings_sponsor_price CHECK (sponsor_price_per_1k > 0),
            CONSTRAINT ck_settings_min_withdraw CHECK (min_withdraw >= 0)
        );
    """)
    op.execute("""
        CREATE TRIGGER trg_settings_updated_at
            BEFORE UPDATE ON settings
            FOR EACH ROW EXECUTE FUNCTION fn_touch_updated_at();
    """)
    # Display texts stay NULL so the application defaults apply
    op.execute("""
        INSERT INTO settings (id, site_name, admin_wallet_address)
        VALUES (1, 'TextFlow', '0xAdminWalletAddress123456789')
        ON CONFLICT (id) DO NOTHING;
    """)


def downgrade() -> None:
    op.execute("DROP TABLE IF EXISTS settings CASCADE;")
