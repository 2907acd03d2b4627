"""MessagingApplicationService — direct messages between users.

Sending is gated on the site-wide enable_direct_messaging switch; reading
existing conversations is always allowed.
"""

from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.errors import (
    CannotMessageSelfError,
    DirectMessagingDisabledError,
    RecipientNotFoundError,
)
from src.tf_messaging.application.schemas import ConversationItem, MessageItem
from src.tf_messaging.infrastructure.persistence import MessageRepository
from src.tf_profile.infrastructure.persistence import ProfileRepository
from src.tf_settings.application.service import settings_cache
from src.tf_settings.domain.cache import SettingsCache


class MessagingApplicationService:
    def __init__(
        self,
        repo: MessageRepository | None = None,
        profiles: ProfileRepository | None = None,
        cache: SettingsCache | None = None,
    ) -> None:
        self._repo = repo or MessageRepository()
        self._profiles = profiles or ProfileRepository()
        self._cache = cache or settings_cache

    async def send(
        self, db: AsyncSession, sender_id: str, receiver_id: str, content: str
    ) -> MessageItem:
        if not self._cache.get().enable_direct_messaging:
            raise DirectMessagingDisabledError()
        if receiver_id == sender_id:
            raise CannotMessageSelfError()
        try:
            if await self._profiles.get(db, receiver_id) is None:
                raise RecipientNotFoundError(receiver_id)
            message = await self._repo.send(db, sender_id, receiver_id, content)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return MessageItem.from_domain(message)

    async def list_conversations(self, db: AsyncSession, user_id: str) -> list[ConversationItem]:
        return [
            ConversationItem.from_domain(c)
            for c in await self._repo.list_conversations(db, user_id)
        ]

    async def get_thread(
        self, db: AsyncSession, user_id: str, other_id: str
    ) -> list[MessageItem]:
        """Oldest first; messages I received in this thread become read."""
        try:
            await self._repo.mark_thread_read(db, user_id, other_id)
            messages = await self._repo.get_thread(db, user_id, other_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return [MessageItem.from_domain(m) for m in messages]
