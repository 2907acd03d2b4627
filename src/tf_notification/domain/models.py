"""Domain models for tf_notification — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class NotificationEvent:
    """A side effect to deliver; produced by social actions."""

    recipient_id: str
    actor_id: str | None
    type: str               # NotificationType value
    message: str
    link: str | None = None

    @property
    def is_self(self) -> bool:
        return self.actor_id is not None and self.actor_id == self.recipient_id


@dataclass
class Notification:
    id: str
    recipient_id: str
    actor_id: str | None
    actor_name: str
    actor_avatar: str | None
    type: str
    message: str
    link: str | None
    is_read: bool
    created_at: datetime | None
