"""Pydantic schemas for tf_settings API."""

from decimal import Decimal
from typing import Any

from pydantic import BaseModel, Field

from src.tf_common.units import micros_to_display, usdt_to_micros
from src.tf_settings.domain.models import SiteSettings


class SettingsResponse(BaseModel):
    site_name: str
    site_logo_url: str | None
    site_background_url: str | None
    creator_rate_per_100k_micros: int
    creator_rate_per_100k_display: str
    sponsor_price_per_1k_micros: int
    sponsor_price_per_1k_display: str
    min_withdraw_micros: int
    min_withdraw_display: str
    admin_wallet_address: str
    about_content: str
    policy_content: str
    enable_direct_messaging: bool

    @classmethod
    def from_domain(cls, s: SiteSettings) -> "SettingsResponse":
        return cls(
            site_name=s.site_name,
            site_logo_url=s.site_logo_url,
            site_background_url=s.site_background_url,
            creator_rate_per_100k_micros=s.creator_rate_per_100k,
            creator_rate_per_100k_display=micros_to_display(s.creator_rate_per_100k, places=6),
            sponsor_price_per_1k_micros=s.sponsor_price_per_1k,
            sponsor_price_per_1k_display=micros_to_display(s.sponsor_price_per_1k, places=6),
            min_withdraw_micros=s.min_withdraw,
            min_withdraw_display=micros_to_display(s.min_withdraw),
            admin_wallet_address=s.admin_wallet_address,
            about_content=s.about_content,
            policy_content=s.policy_content,
            enable_direct_messaging=s.enable_direct_messaging,
        )


class UpdateSettingsRequest(BaseModel):
    """Partial update; omitted (null) fields keep their current value."""

    site_name: str | None = Field(None, min_length=1, max_length=100)
    site_logo_url: str | None = Field(None, max_length=2048)
    site_background_url: str | None = Field(None, max_length=2048)
    creator_rate_per_100k: Decimal | None = Field(None, ge=0, decimal_places=6)
    sponsor_price_per_1k: Decimal | None = Field(None, gt=0, decimal_places=6)
    min_withdraw: Decimal | None = Field(None, ge=0, decimal_places=6)
    admin_wallet_address: str | None = Field(None, min_length=1, max_length=255)
    about_content: str | None = None
    policy_content: str | None = None
    enable_direct_messaging: bool | None = None

    def to_updates(self) -> dict[str, Any]:
        """Field values in domain units (USDT amounts converted to micros)."""
        updates = self.model_dump(exclude_none=True)
        for key in ("creator_rate_per_100k", "sponsor_price_per_1k", "min_withdraw"):
            if key in updates:
                updates[key] = usdt_to_micros(updates[key])
        return updates
