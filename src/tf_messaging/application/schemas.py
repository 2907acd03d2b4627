"""Pydantic request/response schemas for tf_messaging."""

from pydantic import BaseModel, Field, field_validator

from src.tf_common.datetime_utils import to_iso
from src.tf_messaging.domain.models import Conversation, Message


class SendMessageRequest(BaseModel):
    content: str = Field(..., min_length=1, max_length=2000)

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Message must not be blank")
        return v


class MessageItem(BaseModel):
    id: str
    sender_id: str
    receiver_id: str
    content: str
    is_read: bool
    created_at: str | None

    @classmethod
    def from_domain(cls, m: Message) -> "MessageItem":
        return cls(
            id=m.id,
            sender_id=m.sender_id,
            receiver_id=m.receiver_id,
            content=m.content,
            is_read=m.is_read,
            created_at=to_iso(m.created_at),
        )


class ConversationItem(BaseModel):
    other_user_id: str
    other_name: str
    other_avatar: str | None
    last_message: str
    last_active: str | None
    unread_count: int

    @classmethod
    def from_domain(cls, c: Conversation) -> "ConversationItem":
        return cls(
            other_user_id=c.other_user_id,
            other_name=c.other_name,
            other_avatar=c.other_avatar,
            last_message=c.last_message,
            last_active=to_iso(c.last_active),
            unread_count=c.unread_count,
        )
