"""NotificationRepository — raw SQL over the notifications table.

Actor display fields are joined from profiles at read time.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_notification.domain.models import Notification, NotificationEvent

_INSERT_SQL = text("""
    INSERT INTO notifications (user_id, actor_id, type, message, link, is_read)
    VALUES (CAST(:user_id AS UUID), CAST(:actor_id AS UUID), :type, :message, :link, FALSE)
""")

_LIST_SQL = text("""
    SELECT n.id, n.user_id, n.actor_id, n.type, n.message, n.link,
           n.is_read, n.created_at,
           a.name AS actor_name, a.email AS actor_email, a.avatar_url AS actor_avatar
    FROM notifications n
    LEFT JOIN profiles a ON a.id = n.actor_id
    WHERE n.user_id = CAST(:user_id AS UUID)
    ORDER BY n.created_at DESC
    LIMIT :limit
""")

_UNREAD_COUNT_SQL = text("""
    SELECT COUNT(*) FROM notifications
    WHERE user_id = CAST(:user_id AS UUID) AND is_read = FALSE
""")

_MARK_READ_SQL = text("""
    UPDATE notifications SET is_read = TRUE
    WHERE id = CAST(:notification_id AS UUID) AND user_id = CAST(:user_id AS UUID)
    RETURNING id
""")

_MARK_ALL_READ_SQL = text("""
    UPDATE notifications SET is_read = TRUE
    WHERE user_id = CAST(:user_id AS UUID) AND is_read = FALSE
""")


def _actor_name(row: object) -> str:
    if row.actor_name:  # type: ignore[attr-defined]
        return row.actor_name  # type: ignore[attr-defined]
    if row.actor_email:  # type: ignore[attr-defined]
        return row.actor_email.split("@")[0]  # type: ignore[attr-defined]
    return "System"


class NotificationRepository:
    async def insert(self, db: AsyncSession, event: NotificationEvent) -> None:
        await db.execute(
            _INSERT_SQL,
            {
                "user_id": event.recipient_id,
                "actor_id": event.actor_id,
                "type": event.type,
                "message": event.message,
                "link": event.link,
            },
        )

    async def list_for_user(
        self, db: AsyncSession, user_id: str, limit: int
    ) -> list[Notification]:
        result = await db.execute(_LIST_SQL, {"user_id": user_id, "limit": limit})
        return [
            Notification(
                id=str(r.id),
                recipient_id=str(r.user_id),
                actor_id=str(r.actor_id) if r.actor_id else None,
                actor_name=_actor_name(r),
                actor_avatar=r.actor_avatar,
                type=r.type,
                message=r.message,
                link=r.link,
                is_read=r.is_read,
                created_at=r.created_at,
            )
            for r in result.fetchall()
        ]

    async def unread_count(self, db: AsyncSession, user_id: str) -> int:
        return int((await db.execute(_UNREAD_COUNT_SQL, {"user_id": user_id})).scalar_one())

    async def mark_read(self, db: AsyncSession, notification_id: str, user_id: str) -> bool:
        row = (
            await db.execute(
                _MARK_READ_SQL, {"notification_id": notification_id, "user_id": user_id}
            )
        ).fetchone()
        return row is not None

    async def mark_all_read(self, db: AsyncSession, user_id: str) -> int:
        result = await db.execute(_MARK_ALL_READ_SQL, {"user_id": user_id})
        return int(result.rowcount or 0)
