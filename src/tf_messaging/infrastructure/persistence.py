"""MessageRepository — raw SQL over messages.

Conversations are grouped in SQL: one row per other party carrying the
newest message and the number of unread messages they sent me.
"""

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_messaging.domain.models import Conversation, Message
from src.tf_profile.domain.models import default_name

_COLUMNS = "id, sender_id, receiver_id, content, is_read, created_at"

_INSERT_SQL = text(f"""
    INSERT INTO messages (sender_id, receiver_id, content)
    VALUES (CAST(:sender_id AS UUID), CAST(:receiver_id AS UUID), :content)
    RETURNING {_COLUMNS}
""")

_CONVERSATIONS_SQL = text("""
    SELECT c.other_id, c.last_message, c.last_active,
           p.name AS other_name, p.email AS other_email, p.avatar_url AS other_avatar,
           (
               SELECT COUNT(*) FROM messages u
               WHERE u.sender_id = c.other_id
                 AND u.receiver_id = CAST(:user_id AS UUID)
                 AND u.is_read = FALSE
           ) AS unread_count
    FROM (
        SELECT DISTINCT ON (other_id)
               other_id, content AS last_message, created_at AS last_active
        FROM (
            SELECT m.content, m.created_at, m.id,
                   CASE WHEN m.sender_id = CAST(:user_id AS UUID)
                        THEN m.receiver_id ELSE m.sender_id END AS other_id
            FROM messages m
            WHERE m.sender_id = CAST(:user_id AS UUID)
               OR m.receiver_id = CAST(:user_id AS UUID)
        ) mine
        ORDER BY other_id, created_at DESC, id DESC
    ) c
    LEFT JOIN profiles p ON p.id = c.other_id
    ORDER BY c.last_active DESC
""")

_THREAD_SQL = text(f"""
    SELECT {_COLUMNS} FROM messages
    WHERE (sender_id = CAST(:user_id AS UUID) AND receiver_id = CAST(:other_id AS UUID))
       OR (sender_id = CAST(:other_id AS UUID) AND receiver_id = CAST(:user_id AS UUID))
    ORDER BY created_at ASC, id ASC
""")

_MARK_THREAD_READ_SQL = text("""
    UPDATE messages SET is_read = TRUE
    WHERE sender_id = CAST(:other_id AS UUID)
      AND receiver_id = CAST(:user_id AS UUID)
      AND is_read = FALSE
""")


def _row_to_message(row: object) -> Message:
    return Message(
        id=str(row.id),  # type: ignore[attr-defined]
        sender_id=str(row.sender_id),  # type: ignore[attr-defined]
        receiver_id=str(row.receiver_id),  # type: ignore[attr-defined]
        content=row.content,  # type: ignore[attr-defined]
        is_read=bool(row.is_read),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
    )


class MessageRepository:
    async def send(
        self, db: AsyncSession, sender_id: str, receiver_id: str, content: str
    ) -> Message:
        row = (
            await db.execute(
                _INSERT_SQL,
                {"sender_id": sender_id, "receiver_id": receiver_id, "content": content},
            )
        ).fetchone()
        return _row_to_message(row)

    async def list_conversations(self, db: AsyncSession, user_id: str) -> list[Conversation]:
        result = await db.execute(_CONVERSATIONS_SQL, {"user_id": user_id})
        conversations = []
        for r in result.fetchall():
            name = r.other_name or (default_name(r.other_email) if r.other_email else "Unknown")
            conversations.append(
                Conversation(
                    other_user_id=str(r.other_id),
                    other_name=name,
                    other_avatar=r.other_avatar,
                    last_message=r.last_message,
                    last_active=r.last_active,
                    unread_count=int(r.unread_count),
                )
            )
        return conversations

    async def mark_thread_read(self, db: AsyncSession, user_id: str, other_id: str) -> int:
        result = await db.execute(_MARK_THREAD_READ_SQL, {"user_id": user_id, "other_id": other_id})
        return int(result.rowcount or 0)

    async def get_thread(self, db: AsyncSession, user_id: str, other_id: str) -> list[Message]:
        result = await db.execute(_THREAD_SQL, {"user_id": user_id, "other_id": other_id})
        return [_row_to_message(r) for r in result.fetchall()]
