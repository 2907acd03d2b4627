"""Domain models for tf_messaging — pure dataclasses."""

from dataclasses import dataclass
from datetime import datetime


@dataclass
class Message:
    id: str
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool
    created_at: datetime | None = None


@dataclass
class Conversation:
    """Latest message exchanged with one other user, plus my unread count."""

    other_user_id: str
    other_name: str
    other_avatar: str | None
    last_message: str
    last_active: datetime | None
    unread_count: int
