"""Notification read API plus the process-wide dispatcher.

`dispatcher` is started by the app lifespan and lazily by the first
publish() when running without a lifespan (tests, ASGITransport). Each
event is written in its own session so a failed write never touches the
request that produced it.
"""

import logging

from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tf_common.database import async_session_factory
from src.tf_common.errors import NotificationNotFoundError
from src.tf_notification.application.schemas import (
    NotificationItem,
    NotificationListResponse,
)
from src.tf_notification.domain.dispatcher import NotificationDispatcher
from src.tf_notification.domain.models import NotificationEvent
from src.tf_notification.infrastructure.persistence import NotificationRepository

logger = logging.getLogger(__name__)

LIST_LIMIT = 20

_repo = NotificationRepository()


async def _write_in_own_session(event: NotificationEvent) -> None:
    async with async_session_factory() as db:
        try:
            await _repo.insert(db, event)
            await db.commit()
        except Exception:
            await db.rollback()
            raise


dispatcher = NotificationDispatcher(
    writer=_write_in_own_session, maxsize=settings.NOTIFICATION_QUEUE_SIZE
)


class NotificationApplicationService:
    def __init__(self, repo: NotificationRepository | None = None) -> None:
        self._repo = repo or _repo

    async def list_notifications(
        self, db: AsyncSession, user_id: str
    ) -> NotificationListResponse:
        items = await self._repo.list_for_user(db, user_id, LIST_LIMIT)
        unread = await self._repo.unread_count(db, user_id)
        return NotificationListResponse(
            items=[NotificationItem.from_domain(n) for n in items],
            unread_count=unread,
        )

    async def mark_read(self, db: AsyncSession, user_id: str, notification_id: str) -> None:
        try:
            found = await self._repo.mark_read(db, notification_id, user_id)
            if not found:
                raise NotificationNotFoundError(notification_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        try:
            count = await self._repo.mark_all_read(db, user_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return count
