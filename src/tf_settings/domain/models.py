"""Domain model for the singleton site settings row (settings.id = 1)."""

from dataclasses import dataclass, fields, replace
from typing import Any

DEFAULT_ABOUT = (
    "## About Us\n\nWe are the premier platform for text-based creators to "
    "monetize their thoughts.\n\n### Our Mission\nTo empower writers through "
    "crypto micropayments and provide a censorship-resistant platform for "
    "sharing ideas."
)

DEFAULT_POLICY = (
    "## Privacy Policy\n\n1. **Data Collection**: We collect email and basic "
    "profile info to facilitate account management and payments.\n"
    "2. **Payments**: All payments are processed via USDT (TRC20/ERC20/BEP20) "
    "on the blockchain.\n3. **Content**: We do not allow illegal content. "
    "Community guidelines apply to all posts."
)


@dataclass(frozen=True)
class SiteSettings:
    site_name: str = "TextFlow"
    site_logo_url: str | None = None
    site_background_url: str | None = None
    creator_rate_per_100k: int = 100_000       # micros (0.1 USDT per 100k views)
    sponsor_price_per_1k: int = 1_000_000      # micros (1.0 USDT per 1k views)
    min_withdraw: int = 50_000_000             # micros (50 USDT)
    admin_wallet_address: str = "0xAdminWalletAddress123456789"
    about_content: str = DEFAULT_ABOUT
    policy_content: str = DEFAULT_POLICY
    enable_direct_messaging: bool = True

    def merged(self, updates: dict[str, Any]) -> "SiteSettings":
        """Copy with non-None known fields from `updates` applied."""
        known = {f.name for f in fields(self)}
        return replace(
            self, **{k: v for k, v in updates.items() if k in known and v is not None}
        )

    def as_row(self) -> dict[str, Any]:
        return {f.name: getattr(self, f.name) for f in fields(self)}
