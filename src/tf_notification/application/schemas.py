"""Pydantic response schemas for tf_notification."""

from pydantic import BaseModel

from src.tf_common.datetime_utils import to_iso
from src.tf_notification.domain.models import Notification


class NotificationItem(BaseModel):
    id: str
    actor_id: str | None
    actor_name: str
    actor_avatar: str | None
    type: str
    message: str
    link: str | None
    is_read: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, n: Notification) -> "NotificationItem":
        return cls(
            id=n.id,
            actor_id=n.actor_id,
            actor_name=n.actor_name,
            actor_avatar=n.actor_avatar,
            type=n.type,
            message=n.message,
            link=n.link,
            is_read=n.is_read,
            created_at=to_iso(n.created_at),
        )


class NotificationListResponse(BaseModel):
    items: list[NotificationItem]
    unread_count: int


class MarkAllReadResponse(BaseModel):
    marked: int
