"""User service: register, login, refresh.

Register owns its unit of work: the users row, the profiles row and (for the
configured admin email) the seed DEPOSIT ledger row commit together.
"""

import logging

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tf_common.errors import AccountDisabledError, EmailExistsError, InvalidCredentialsError
from src.tf_gateway.auth.security import (
    REFRESH,
    TokenPair,
    create_access_token,
    decode_token,
    hash_password,
    issue_token_pair,
    verify_password,
)
from src.tf_gateway.user.db_models import UserModel
from src.tf_profile.application.service import ProfileService
from src.tf_profile.domain.models import Profile

logger = logging.getLogger(__name__)


class UserService:
    """Stateless service — instantiate once, reuse across requests."""

    def __init__(self, profiles: ProfileService | None = None) -> None:
        self._profiles = profiles or ProfileService()

    async def register(
        self, email: str, password: str, db: AsyncSession
    ) -> tuple[UserModel, Profile]:
        try:
            # DB UNIQUE constraint is the final guard
            result = await db.execute(
                select(UserModel).where(func.lower(UserModel.email) == email.lower())
            )
            if result.scalar_one_or_none() is not None:
                raise EmailExistsError()

            user = UserModel(
                email=email,
                password_hash=hash_password(password),
                is_active=True,
            )
            db.add(user)
            await db.flush()  # Get user.id without committing

            profile = await self._profiles.create_for_user(
                db,
                str(user.id),
                email,
                settings.ADMIN_EMAIL,
                settings.ADMIN_SEED_BALANCE_MICROS,
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("registered %s (%s)", user.id, profile.role)
        return user, profile

    async def login(
        self, email: str, password: str, db: AsyncSession
    ) -> tuple[UserModel, TokenPair]:
        """Authenticate and issue tokens.

        Unknown email and wrong password raise the same error so that
        registered emails cannot be enumerated.
        """
        result = await db.execute(
            select(UserModel).where(func.lower(UserModel.email) == email.lower())
        )
        user = result.scalar_one_or_none()

        if user is None or not verify_password(password, user.password_hash):
            raise InvalidCredentialsError()

        if not user.is_active:
            raise AccountDisabledError()

        return user, issue_token_pair(str(user.id))

    async def refresh(self, refresh_token: str) -> str:
        """Validate a refresh token and return a new access token (no rotation)."""
        payload = decode_token(refresh_token, expected_type=REFRESH)
        return create_access_token(payload["sub"])
