"""FastAPI dependencies: get_current_user, get_current_profile, require_admin.

Usage in any protected router:
    from src.tf_gateway.auth.dependencies import get_current_profile

    @router.get("/protected")
    async def protected(profile: Annotated[Profile, Depends(get_current_profile)]):
        ...
"""

import uuid
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.errors import AccountDisabledError, AdminRequiredError, InvalidCredentialsError
from src.tf_gateway.auth.security import ACCESS, decode_token
from src.tf_gateway.user.db_models import UserModel
from src.tf_profile.application.service import ProfileService
from src.tf_profile.domain.models import Profile

# tokenUrl tells Swagger UI where to get a token (used for the "Authorize" button)
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login")

# Reusable 401 exception with WWW-Authenticate header (OAuth2 standard)
_CREDENTIALS_EXCEPTION = HTTPException(
    status_code=status.HTTP_401_UNAUTHORIZED,
    detail="Invalid or expired token",
    headers={"WWW-Authenticate": "Bearer"},
)

_profiles = ProfileService()


async def get_current_user(
    token: Annotated[str, Depends(oauth2_scheme)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> UserModel:
    """Validate the Bearer access token and return the UserModel.

    Raises HTTP 401 if the token is missing, invalid, expired or orphaned.
    Raises AccountDisabledError (403) if the account is disabled.
    """
    try:
        payload = decode_token(token, expected_type=ACCESS)
    except InvalidCredentialsError:
        raise _CREDENTIALS_EXCEPTION from None

    try:
        user_id = uuid.UUID(payload["sub"])
    except ValueError:
        raise _CREDENTIALS_EXCEPTION from None

    result = await db.execute(select(UserModel).where(UserModel.id == user_id))
    user = result.scalar_one_or_none()
    if user is None:
        raise _CREDENTIALS_EXCEPTION

    if not user.is_active:
        raise AccountDisabledError()

    return user


async def get_current_profile(
    user: Annotated[UserModel, Depends(get_current_user)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> Profile:
    """Profile of the caller; a transient default if the row is missing."""
    return await _profiles.resolve(db, str(user.id), user.email)


async def require_admin(
    profile: Annotated[Profile, Depends(get_current_profile)],
) -> Profile:
    if not profile.is_admin:
        raise AdminRequiredError()
    return profile
