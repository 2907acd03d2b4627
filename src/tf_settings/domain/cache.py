"""Process-wide site settings cache.

Lifecycle is explicit:
  - load()     once at startup (lifespan); tolerates a missing row/table
  - refresh()  before pricing-sensitive operations (sponsor, withdraw)
  - replace()  after an admin write, with the row that was just stored
  - get()      everywhere else; never touches the database
"""

import logging
from typing import Protocol

from sqlalchemy.exc import DBAPIError
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import is_missing_schema_error
from src.tf_settings.domain.models import SiteSettings

logger = logging.getLogger(__name__)


class SettingsSource(Protocol):
    async def get(self, db: AsyncSession, for_update: bool = False) -> SiteSettings | None: ...


class SettingsCache:
    def __init__(self, source: SettingsSource) -> None:
        self._source = source
        self._current = SiteSettings()
        self._loaded = False

    @property
    def loaded(self) -> bool:
        return self._loaded

    def get(self) -> SiteSettings:
        return self._current

    def replace(self, new: SiteSettings) -> None:
        self._current = new
        self._loaded = True

    async def load(self, db: AsyncSession) -> SiteSettings:
        """Startup load. Missing row or missing table keeps the defaults."""
        try:
            return await self.refresh(db)
        except DBAPIError as e:
            if not is_missing_schema_error(e):
                raise
            await db.rollback()
            logger.warning("settings table not found; using default settings until migrated")
            return self._current

    async def refresh(self, db: AsyncSession) -> SiteSettings:
        stored = await self._source.get(db)
        if stored is None:
            logger.info("settings row missing; keeping defaults")
        else:
            self._current = stored
        self._loaded = True
        return self._current
