"""SettingsRepository — reads and upserts the singleton settings row (id = 1)."""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.errors import InternalError
from src.tf_settings.domain.models import SiteSettings

_COLUMNS = """
    site_name, site_logo_url, site_background_url,
    creator_rate_per_100k, sponsor_price_per_1k, min_withdraw,
    admin_wallet_address, about_content, policy_content,
    enable_direct_messaging
"""

_GET_SQL = text(f"SELECT {_COLUMNS} FROM settings WHERE id = 1")

_GET_FOR_UPDATE_SQL = text(f"SELECT {_COLUMNS} FROM settings WHERE id = 1 FOR UPDATE")

_UPSERT_SQL = text(f"""
    INSERT INTO settings (id, {_COLUMNS})
    VALUES (
        1, :site_name, :site_logo_url, :site_background_url,
        :creator_rate_per_100k, :sponsor_price_per_1k, :min_withdraw,
        :admin_wallet_address, :about_content, :policy_content,
        :enable_direct_messaging
    )
    ON CONFLICT (id) DO UPDATE SET
        site_name               = EXCLUDED.site_name,
        site_logo_url           = EXCLUDED.site_logo_url,
        site_background_url     = EXCLUDED.site_background_url,
        creator_rate_per_100k   = EXCLUDED.creator_rate_per_100k,
        sponsor_price_per_1k    = EXCLUDED.sponsor_price_per_1k,
        min_withdraw            = EXCLUDED.min_withdraw,
        admin_wallet_address    = EXCLUDED.admin_wallet_address,
        about_content           = EXCLUDED.about_content,
        policy_content          = EXCLUDED.policy_content,
        enable_direct_messaging = EXCLUDED.enable_direct_messaging,
        updated_at              = NOW()
    RETURNING {_COLUMNS}
""")


def _row_to_settings(row: object) -> SiteSettings:
    defaults = SiteSettings()
    # NULL columns fall back to defaults (row created by an older schema)
    return defaults.merged(
        {
            "site_name": row.site_name,  # type: ignore[attr-defined]
            "site_logo_url": row.site_logo_url,  # type: ignore[attr-defined]
            "site_background_url": row.site_background_url,  # type: ignore[attr-defined]
            "creator_rate_per_100k": row.creator_rate_per_100k,  # type: ignore[attr-defined]
            "sponsor_price_per_1k": row.sponsor_price_per_1k,  # type: ignore[attr-defined]
            "min_withdraw": row.min_withdraw,  # type: ignore[attr-defined]
            "admin_wallet_address": row.admin_wallet_address,  # type: ignore[attr-defined]
            "about_content": row.about_content,  # type: ignore[attr-defined]
            "policy_content": row.policy_content,  # type: ignore[attr-defined]
            "enable_direct_messaging": row.enable_direct_messaging,  # type: ignore[attr-defined]
        }
    )


class SettingsRepository:
    async def get(self, db: AsyncSession, for_update: bool = False) -> SiteSettings | None:
        sql = _GET_FOR_UPDATE_SQL if for_update else _GET_SQL
        row = (await db.execute(sql)).fetchone()
        return _row_to_settings(row) if row else None

    async def upsert(self, db: AsyncSession, new: SiteSettings) -> SiteSettings:
        row = (await db.execute(_UPSERT_SQL, new.as_row())).fetchone()
        if row is None:
            raise InternalError("Settings upsert returned no rows")
        return _row_to_settings(row)
