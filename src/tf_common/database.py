from collections.abc import AsyncGenerator

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)
from sqlalchemy.orm import DeclarativeBase

from config.settings import settings

# PostgreSQL SQLSTATEs
_UNDEFINED_TABLE_SQLSTATE = "42P01"
INVALID_TEXT_REPRESENTATION_SQLSTATE = "22P02"


class Base(DeclarativeBase):
    """Shared declarative base for all ORM models across modules."""

    pass


engine: AsyncEngine = create_async_engine(
    settings.DATABASE_URL,
    echo=settings.DEBUG,
    pool_size=20,
    max_overflow=10,
)

async_session_factory = async_sessionmaker(
    engine,
    class_=AsyncSession,
    expire_on_commit=False,
)


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """FastAPI dependency: yields an AsyncSession, auto-closes after request."""
    async with async_session_factory() as session:
        yield session


def sqlstate_of(exc: BaseException) -> str | None:
    """SQLSTATE of a wrapped driver error, if the driver exposes one."""
    if not isinstance(exc, DBAPIError):
        return None
    orig = exc.orig
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def is_missing_schema_error(exc: BaseException) -> bool:
    """True when a DB error means the schema has not been migrated yet.

    Falls back to message matching for drivers that do not expose SQLSTATE.
    """
    if not isinstance(exc, DBAPIError):
        return False
    if sqlstate_of(exc) == _UNDEFINED_TABLE_SQLSTATE:
        return True
    message = str(exc.orig).lower()
    return "relation" in message and "does not exist" in message
