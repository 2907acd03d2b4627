"""Domain models for tf_profile — pure dataclasses, no SQLAlchemy dependency."""

from dataclasses import dataclass
from datetime import datetime

from src.tf_common.enums import UserRole

AVATAR_URL_TEMPLATE = "https://api.dicebear.com/7.x/avataaars/svg?seed={seed}"


def default_name(email: str) -> str:
    return email.split("@")[0]


def default_avatar(email: str) -> str:
    return AVATAR_URL_TEMPLATE.format(seed=email)


@dataclass
class Profile:
    id: str
    email: str
    role: str
    balance: int  # micros
    name: str | None = None
    avatar_url: str | None = None
    email_public: bool = True
    created_at: datetime | None = None
    # Synthesized for an identity whose profile row is missing; never persisted
    transient: bool = False

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.ADMIN.value

    @property
    def display_name(self) -> str:
        return self.name or default_name(self.email)

    @classmethod
    def transient_default(cls, user_id: str, email: str) -> "Profile":
        return cls(
            id=user_id,
            email=email,
            role=UserRole.USER.value,
            balance=0,
            name=default_name(email),
            avatar_url=default_avatar(email),
            transient=True,
        )
