"""Pydantic request/response schemas for tf_profile."""

from decimal import Decimal

from pydantic import BaseModel, EmailStr, Field

from src.tf_common.datetime_utils import to_iso
from src.tf_common.units import MAX_AMOUNT_USDT, micros_to_display, usdt_to_micros
from src.tf_profile.domain.models import Profile


class UpdateProfileRequest(BaseModel):
    avatar_url: str | None = Field(None, max_length=1024)
    email_public: bool | None = None


class AdminUpdateUserRequest(BaseModel):
    name: str | None = Field(None, min_length=1, max_length=128)
    email: EmailStr | None = None
    balance: Decimal | None = Field(
        None, ge=0, le=MAX_AMOUNT_USDT, decimal_places=6, description="Target balance in USDT"
    )

    @property
    def balance_micros(self) -> int:
        return usdt_to_micros(self.balance) if self.balance is not None else 0


class ProfileResponse(BaseModel):
    """Full profile, as seen by its owner or an admin."""

    id: str
    email: str
    role: str
    name: str
    avatar_url: str | None
    email_public: bool
    balance_micros: int
    balance_display: str
    created_at: str | None
    transient: bool = False

    @classmethod
    def from_domain(cls, p: Profile) -> "ProfileResponse":
        return cls(
            id=p.id,
            email=p.email,
            role=p.role,
            name=p.display_name,
            avatar_url=p.avatar_url,
            email_public=p.email_public,
            balance_micros=p.balance,
            balance_display=micros_to_display(p.balance),
            created_at=to_iso(p.created_at),
            transient=p.transient,
        )


class PublicProfileResponse(BaseModel):
    id: str
    name: str
    avatar_url: str | None
    email: str | None
    created_at: str | None

    @classmethod
    def from_domain(cls, p: Profile, show_email: bool) -> "PublicProfileResponse":
        return cls(
            id=p.id,
            name=p.display_name,
            avatar_url=p.avatar_url,
            email=p.email if show_email else None,
            created_at=to_iso(p.created_at),
        )
