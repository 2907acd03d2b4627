"""ProfileService — identity -> profile resolution and profile edits.

Reads never write: a missing profile row resolves to a transient default.
Admin bootstrap is an explicit, idempotent step run at startup.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.enums import UserRole
from src.tf_common.errors import EmailExistsError, ProfileNotFoundError
from src.tf_ledger.application.service import SEED_REFERENCE, LedgerApplicationService
from src.tf_profile.application.schemas import (
    AdminUpdateUserRequest,
    ProfileResponse,
    PublicProfileResponse,
    UpdateProfileRequest,
)
from src.tf_profile.domain.models import Profile, default_avatar, default_name
from src.tf_profile.infrastructure.persistence import ProfileRepository

logger = logging.getLogger(__name__)


class ProfileService:
    def __init__(
        self,
        repo: ProfileRepository | None = None,
        ledger: LedgerApplicationService | None = None,
    ) -> None:
        self._repo = repo or ProfileRepository()
        self._ledger = ledger or LedgerApplicationService()

    async def resolve(self, db: AsyncSession, user_id: str, email_fallback: str) -> Profile:
        profile = await self._repo.get(db, user_id)
        if profile is None:
            return Profile.transient_default(user_id, email_fallback)
        return profile

    async def create_for_user(
        self,
        db: AsyncSession,
        user_id: str,
        email: str,
        admin_email: str | None,
        seed_balance: int,
    ) -> Profile:
        """Insert the profile row for a new user inside the caller's transaction."""
        is_admin = admin_email is not None and email.lower() == admin_email.lower()
        role = UserRole.ADMIN if is_admin else UserRole.USER
        profile = await self._repo.insert(
            db, user_id, email, role.value, default_name(email), default_avatar(email)
        )
        if is_admin and seed_balance > 0:
            profile.balance, _ = await self._ledger.record_deposit(
                db, user_id, seed_balance, reference=SEED_REFERENCE
            )
            logger.info("admin profile created for %s with seed balance", email)
        return profile

    async def bootstrap_admin(self, db: AsyncSession, email: str, seed_balance: int) -> bool:
        """Promote `email` to ADMIN and credit the seed balance once.

        Returns True when a promotion happened. Already-ADMIN and unknown
        emails are no-ops, so running it on every startup is safe.
        """
        try:
            profile = await self._repo.get_by_email(db, email)
            if profile is None or profile.is_admin:
                await db.rollback()
                return False
            await self._repo.set_role(db, profile.id, UserRole.ADMIN.value)
            if seed_balance > 0:
                await self._ledger.record_deposit(
                    db, profile.id, seed_balance, reference=SEED_REFERENCE
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("bootstrapped admin role for %s", email)
        return True

    async def grant_admin(self, db: AsyncSession, user_id: str) -> ProfileResponse:
        try:
            profile = await self._repo.set_role(db, user_id, UserRole.ADMIN.value)
            if profile is None:
                raise ProfileNotFoundError(user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("admin role granted to %s", user_id)
        return ProfileResponse.from_domain(profile)

    async def get_public(
        self, db: AsyncSession, user_id: str, viewer: Profile
    ) -> PublicProfileResponse:
        profile = await self._repo.get(db, user_id)
        if profile is None:
            raise ProfileNotFoundError(user_id)
        show_email = profile.email_public or viewer.id == profile.id or viewer.is_admin
        return PublicProfileResponse.from_domain(profile, show_email=show_email)

    async def update_me(
        self, db: AsyncSession, profile: Profile, body: UpdateProfileRequest
    ) -> ProfileResponse:
        if profile.transient:
            raise ProfileNotFoundError(profile.id)
        try:
            updated = await self._repo.update(
                db,
                profile.id,
                avatar_url=body.avatar_url,
                email_public=body.email_public,
            )
            if updated is None:
                raise ProfileNotFoundError(profile.id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ProfileResponse.from_domain(updated)

    async def list_users(
        self, db: AsyncSession, limit: int, offset: int
    ) -> list[ProfileResponse]:
        return [
            ProfileResponse.from_domain(p) for p in await self._repo.list_all(db, limit, offset)
        ]

    async def admin_update_user(
        self, db: AsyncSession, user_id: str, body: AdminUpdateUserRequest
    ) -> ProfileResponse:
        """Edit name/email/balance in one unit of work.

        A changed email also changes the login credential; a changed balance
        is recorded as an ADMIN-ADJUST ledger row.
        """
        try:
            if body.email is not None:
                if await self._repo.email_taken(db, body.email, user_id):
                    raise EmailExistsError()
                await self._repo.update_login_email(db, user_id, body.email)
            profile = await self._repo.update(db, user_id, name=body.name, email=body.email)
            if profile is None:
                raise ProfileNotFoundError(user_id)
            if body.balance is not None:
                profile.balance, _ = await self._ledger.adjust_balance(
                    db, user_id, body.balance_micros
                )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("admin updated user %s", user_id)
        return ProfileResponse.from_domain(profile)
