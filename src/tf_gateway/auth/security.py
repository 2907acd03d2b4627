"""Credential primitives: bcrypt password hashes and JWT access/refresh tokens.

Passwords use the ``bcrypt`` library directly (>=4.0); passlib is avoided
because it is unmaintained and incompatible with bcrypt >=4.

Tokens are HS256 (symmetric) with a ``type`` claim so that a refresh token
can never be used as an access token and vice versa. There is no revocation:
a token is valid until ``exp``.
"""

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta

import bcrypt
from jose import JWTError, jwt

from config.settings import settings
from src.tf_common.errors import InvalidCredentialsError, InvalidRefreshTokenError

ACCESS = "access"
REFRESH = "refresh"

_TTL = {
    ACCESS: timedelta(minutes=settings.JWT_EXPIRE_MINUTES),
    REFRESH: timedelta(days=settings.JWT_REFRESH_EXPIRE_DAYS),
}


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str
    expires_in: int  # access token lifetime, seconds


def hash_password(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def verify_password(plain: str, hashed: str) -> bool:
    try:
        return bcrypt.checkpw(plain.encode("utf-8"), hashed.encode("utf-8"))
    except ValueError:
        # Malformed stored hash
        return False


def _encode(user_id: str, token_type: str) -> str:
    now = datetime.now(UTC)
    payload = {
        "sub": user_id,
        "type": token_type,
        "iat": now,
        "exp": now + _TTL[token_type],
    }
    return str(jwt.encode(payload, settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM))


def create_access_token(user_id: str) -> str:
    return _encode(user_id, ACCESS)


def issue_token_pair(user_id: str) -> TokenPair:
    return TokenPair(
        access_token=_encode(user_id, ACCESS),
        refresh_token=_encode(user_id, REFRESH),
        expires_in=int(_TTL[ACCESS].total_seconds()),
    )


def decode_token(token: str, expected_type: str) -> dict[str, str]:
    """Decode and validate a JWT, enforcing its ``type`` claim.

    Raises InvalidCredentialsError for access tokens and
    InvalidRefreshTokenError for refresh tokens.
    """
    error = InvalidCredentialsError if expected_type == ACCESS else InvalidRefreshTokenError
    try:
        payload: dict[str, str] = jwt.decode(
            token,
            settings.JWT_SECRET,
            algorithms=[settings.JWT_ALGORITHM],  # Explicit list prevents algorithm confusion
        )
    except JWTError:
        raise error() from None
    if payload.get("type") != expected_type or not payload.get("sub"):
        raise error()
    return payload
