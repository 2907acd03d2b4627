"""SettingsApplicationService — public read and admin partial update.

`settings_cache` is the process-wide instance; the app lifespan loads it
once and pricing-sensitive services refresh it before use.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_settings.application.schemas import SettingsResponse, UpdateSettingsRequest
from src.tf_settings.domain.cache import SettingsCache
from src.tf_settings.infrastructure.persistence import SettingsRepository

logger = logging.getLogger(__name__)

settings_cache = SettingsCache(SettingsRepository())


class SettingsApplicationService:
    def __init__(
        self,
        repo: SettingsRepository | None = None,
        cache: SettingsCache | None = None,
    ) -> None:
        self._repo = repo or SettingsRepository()
        self._cache = cache or settings_cache

    async def get_settings(self, db: AsyncSession) -> SettingsResponse:
        if not self._cache.loaded:
            await self._cache.load(db)
        return SettingsResponse.from_domain(self._cache.get())

    async def update_settings(
        self, db: AsyncSession, body: UpdateSettingsRequest
    ) -> SettingsResponse:
        try:
            current = await self._repo.get(db, for_update=True) or self._cache.get()
            stored = await self._repo.upsert(db, current.merged(body.to_updates()))
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        self._cache.replace(stored)
        logger.info("site settings updated: %s", sorted(body.model_dump(exclude_none=True)))
        return SettingsResponse.from_domain(stored)
