"""ProfileRepository — raw SQL over profiles (and users for credential edits).

Transaction ownership: the caller commits or rolls back.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_profile.domain.models import Profile

_COLUMNS = "id, email, role, balance, name, avatar_url, email_public, created_at"

_GET_SQL = text(f"""
    SELECT {_COLUMNS} FROM profiles WHERE id = CAST(:user_id AS UUID)
""")

_GET_BY_EMAIL_SQL = text(f"""
    SELECT {_COLUMNS} FROM profiles WHERE lower(email) = lower(:email)
""")

_INSERT_SQL = text(f"""
    INSERT INTO profiles (id, email, role, balance, name, avatar_url, email_public)
    VALUES (CAST(:user_id AS UUID), :email, :role, 0, :name, :avatar_url, TRUE)
    RETURNING {_COLUMNS}
""")

_SET_ROLE_SQL = text(f"""
    UPDATE profiles SET role = :role, updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID)
    RETURNING {_COLUMNS}
""")

_UPDATE_SQL = text(f"""
    UPDATE profiles
    SET name = COALESCE(CAST(:name AS TEXT), name),
        email = COALESCE(CAST(:email AS TEXT), email),
        avatar_url = COALESCE(CAST(:avatar_url AS TEXT), avatar_url),
        email_public = COALESCE(CAST(:email_public AS BOOLEAN), email_public),
        updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID)
    RETURNING {_COLUMNS}
""")

_UPDATE_LOGIN_EMAIL_SQL = text("""
    UPDATE users SET email = :email, updated_at = NOW()
    WHERE id = CAST(:user_id AS UUID)
""")

_EMAIL_TAKEN_SQL = text("""
    SELECT 1 FROM users
    WHERE lower(email) = lower(:email) AND id <> CAST(:user_id AS UUID)
""")

_LIST_SQL = text(f"""
    SELECT {_COLUMNS} FROM profiles
    ORDER BY created_at DESC, id DESC
    LIMIT :limit OFFSET :offset
""")


def _row_to_profile(row: object) -> Profile:
    return Profile(
        id=str(row.id),  # type: ignore[attr-defined]
        email=row.email,  # type: ignore[attr-defined]
        role=row.role,  # type: ignore[attr-defined]
        balance=int(row.balance),  # type: ignore[attr-defined]
        name=row.name,  # type: ignore[attr-defined]
        avatar_url=row.avatar_url,  # type: ignore[attr-defined]
        email_public=bool(row.email_public),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class ProfileRepository:
    async def get(self, db: AsyncSession, user_id: str) -> Profile | None:
        row = (await db.execute(_GET_SQL, {"user_id": user_id})).fetchone()
        return _row_to_profile(row) if row else None

    async def get_by_email(self, db: AsyncSession, email: str) -> Profile | None:
        row = (await db.execute(_GET_BY_EMAIL_SQL, {"email": email})).fetchone()
        return _row_to_profile(row) if row else None

    async def insert(
        self,
        db: AsyncSession,
        user_id: str,
        email: str,
        role: str,
        name: str,
        avatar_url: str,
    ) -> Profile:
        row = (
            await db.execute(
                _INSERT_SQL,
                {
                    "user_id": user_id,
                    "email": email,
                    "role": role,
                    "name": name,
                    "avatar_url": avatar_url,
                },
            )
        ).fetchone()
        return _row_to_profile(row)

    async def set_role(self, db: AsyncSession, user_id: str, role: str) -> Profile | None:
        row = (
            await db.execute(_SET_ROLE_SQL, {"user_id": user_id, "role": role})
        ).fetchone()
        return _row_to_profile(row) if row else None

    async def update(
        self,
        db: AsyncSession,
        user_id: str,
        *,
        name: str | None = None,
        email: str | None = None,
        avatar_url: str | None = None,
        email_public: bool | None = None,
    ) -> Profile | None:
        """Partial update; None leaves a column unchanged."""
        row = (
            await db.execute(
                _UPDATE_SQL,
                {
                    "user_id": user_id,
                    "name": name,
                    "email": email,
                    "avatar_url": avatar_url,
                    "email_public": email_public,
                },
            )
        ).fetchone()
        return _row_to_profile(row) if row else None

    async def email_taken(self, db: AsyncSession, email: str, user_id: str) -> bool:
        row = (
            await db.execute(_EMAIL_TAKEN_SQL, {"email": email, "user_id": user_id})
        ).fetchone()
        return row is not None

    async def update_login_email(self, db: AsyncSession, user_id: str, email: str) -> None:
        await db.execute(_UPDATE_LOGIN_EMAIL_SQL, {"user_id": user_id, "email": email})

    async def list_all(self, db: AsyncSession, limit: int, offset: int) -> list[Profile]:
        result = await db.execute(_LIST_SQL, {"limit": limit, "offset": offset})
        return [_row_to_profile(r) for r in result.fetchall()]
