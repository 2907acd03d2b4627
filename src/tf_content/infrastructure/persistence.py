"""ContentRepository — posts, reactions, views, comments and follows.

Counters are single-statement atomic increments. Author display fields are
joined from profiles at read time, never copied onto the rows.
Transaction ownership: the caller commits or rolls back.
"""

from datetime import datetime

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.enums import ReactionType
from src.tf_content.domain.models import Comment, Post

# ---------------------------------------------------------------------------
# SQL: posts
# ---------------------------------------------------------------------------

_POST_SELECT = """
    SELECT p.id, p.user_id, p.content, p.type, p.views, p.likes, p.hearts,
           p.hahas, p.sponsored, p.created_at, p.updated_at,
           a.email AS author_email, a.name AS author_name,
           a.avatar_url AS author_avatar, a.email_public AS author_email_public
    FROM posts p
    LEFT JOIN profiles a ON a.id = p.user_id
"""

_INSERT_POST_SQL = text("""
    INSERT INTO posts (user_id, content, type)
    VALUES (CAST(:user_id AS UUID), :content, :type)
    RETURNING id
""")

_GET_POST_SQL = text(_POST_SELECT + """
    WHERE p.id = CAST(:post_id AS UUID)
""")

_FEED_SQL = text(_POST_SELECT + """
    WHERE (CAST(:user_id AS UUID) IS NULL OR p.user_id = CAST(:user_id AS UUID))
      AND (
          CAST(:cursor_ts AS TIMESTAMPTZ) IS NULL
          OR p.created_at < CAST(:cursor_ts AS TIMESTAMPTZ)
          OR (
              p.created_at = CAST(:cursor_ts AS TIMESTAMPTZ)
              AND p.id < CAST(:cursor_id AS UUID)
          )
      )
    ORDER BY p.created_at DESC, p.id DESC
    LIMIT :limit
""")

_UPDATE_POST_SQL = text("""
    UPDATE posts SET content = :content, type = :type, updated_at = NOW()
    WHERE id = CAST(:post_id AS UUID)
    RETURNING id
""")

_DELETE_POST_SQL = text("""
    DELETE FROM posts WHERE id = CAST(:post_id AS UUID) RETURNING id
""")

_INCREMENT_VIEWS_SQL = text("""
    UPDATE posts SET views = views + 1
    WHERE id = CAST(:post_id AS UUID)
    RETURNING views
""")

# Column names cannot be bound; one statement per whitelisted counter
_REACT_SQL = {
    reaction: text(f"""
        UPDATE posts SET {reaction.value} = {reaction.value} + 1
        WHERE id = CAST(:post_id AS UUID)
        RETURNING user_id, {reaction.value} AS count
    """)
    for reaction in ReactionType
}

# ---------------------------------------------------------------------------
# SQL: comments
# ---------------------------------------------------------------------------

_COMMENT_SELECT = """
    SELECT c.id, c.post_id, c.user_id, c.content, c.created_at,
           a.email AS author_email, a.name AS author_name,
           a.avatar_url AS author_avatar, a.email_public AS author_email_public
    FROM comments c
    LEFT JOIN profiles a ON a.id = c.user_id
"""

_INSERT_COMMENT_SQL = text("""
    INSERT INTO comments (post_id, user_id, content)
    VALUES (CAST(:post_id AS UUID), CAST(:user_id AS UUID), :content)
    RETURNING id
""")

_GET_COMMENT_SQL = text(_COMMENT_SELECT + """
    WHERE c.id = CAST(:comment_id AS UUID)
""")

_LIST_COMMENTS_SQL = text(_COMMENT_SELECT + """
    WHERE c.post_id = CAST(:post_id AS UUID)
    ORDER BY c.created_at ASC, c.id ASC
""")

_DELETE_COMMENT_SQL = text("""
    DELETE FROM comments WHERE id = CAST(:comment_id AS UUID) RETURNING id
""")

# ---------------------------------------------------------------------------
# SQL: follows
# ---------------------------------------------------------------------------

_FOLLOW_SQL = text("""
    INSERT INTO follows (follower_id, following_id)
    VALUES (CAST(:follower_id AS UUID), CAST(:following_id AS UUID))
    ON CONFLICT (follower_id, following_id) DO NOTHING
    RETURNING follower_id
""")

_UNFOLLOW_SQL = text("""
    DELETE FROM follows
    WHERE follower_id = CAST(:follower_id AS UUID)
      AND following_id = CAST(:following_id AS UUID)
    RETURNING follower_id
""")

_IS_FOLLOWING_SQL = text("""
    SELECT 1 FROM follows
    WHERE follower_id = CAST(:follower_id AS UUID)
      AND following_id = CAST(:following_id AS UUID)
""")

_FOLLOWER_COUNT_SQL = text("""
    SELECT COUNT(*) FROM follows WHERE following_id = CAST(:user_id AS UUID)
""")

_PROFILE_EXISTS_SQL = text("""
    SELECT 1 FROM profiles WHERE id = CAST(:user_id AS UUID)
""")


def _public_email(row: object) -> str | None:
    if row.author_email_public:  # type: ignore[attr-defined]
        return row.author_email  # type: ignore[attr-defined]
    return None


def _row_to_post(row: object) -> Post:
    return Post(
        id=str(row.id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        content=row.content,  # type: ignore[attr-defined]
        type=row.type,  # type: ignore[attr-defined]
        views=int(row.views),  # type: ignore[attr-defined]
        likes=int(row.likes),  # type: ignore[attr-defined]
        hearts=int(row.hearts),  # type: ignore[attr-defined]
        hahas=int(row.hahas),  # type: ignore[attr-defined]
        sponsored=bool(row.sponsored),  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        updated_at=row.updated_at,  # type: ignore[attr-defined]
        author_email=_public_email(row),
        author_name=row.author_name,  # type: ignore[attr-defined]
        author_avatar=row.author_avatar,  # type: ignore[attr-defined]
    )


def _row_to_comment(row: object) -> Comment:
    return Comment(
        id=str(row.id),  # type: ignore[attr-defined]
        post_id=str(row.post_id),  # type: ignore[attr-defined]
        user_id=str(row.user_id),  # type: ignore[attr-defined]
        content=row.content,  # type: ignore[attr-defined]
        created_at=row.created_at,  # type: ignore[attr-defined]
        author_email=_public_email(row),
        author_name=row.author_name,  # type: ignore[attr-defined]
        author_avatar=row.author_avatar,  # type: ignore[attr-defined]
    )


class ContentRepository:
    # --- posts ---

    async def create_post(
        self, db: AsyncSession, user_id: str, content: str, post_type: str
    ) -> Post:
        row = (
            await db.execute(
                _INSERT_POST_SQL,
                {"user_id": user_id, "content": content, "type": post_type},
            )
        ).fetchone()
        post = await self.get_post(db, str(row.id))  # type: ignore[union-attr]
        assert post is not None
        return post

    async def get_post(self, db: AsyncSession, post_id: str) -> Post | None:
        row = (await db.execute(_GET_POST_SQL, {"post_id": post_id})).fetchone()
        return _row_to_post(row) if row else None

    async def list_posts(
        self,
        db: AsyncSession,
        user_id: str | None,
        cursor_ts: datetime | None,
        cursor_id: str | None,
        limit: int,
    ) -> list[Post]:
        result = await db.execute(
            _FEED_SQL,
            {
                "user_id": user_id,
                "cursor_ts": cursor_ts,
                "cursor_id": cursor_id,
                "limit": limit,
            },
        )
        return [_row_to_post(r) for r in result.fetchall()]

    async def update_post(
        self, db: AsyncSession, post_id: str, content: str, post_type: str
    ) -> bool:
        row = (
            await db.execute(
                _UPDATE_POST_SQL,
                {"post_id": post_id, "content": content, "type": post_type},
            )
        ).fetchone()
        return row is not None

    async def delete_post(self, db: AsyncSession, post_id: str) -> bool:
        row = (await db.execute(_DELETE_POST_SQL, {"post_id": post_id})).fetchone()
        return row is not None

    async def increment_views(self, db: AsyncSession, post_id: str) -> int | None:
        row = (await db.execute(_INCREMENT_VIEWS_SQL, {"post_id": post_id})).fetchone()
        return int(row.views) if row else None

    async def react(
        self, db: AsyncSession, post_id: str, reaction: ReactionType
    ) -> tuple[str, int] | None:
        """Increment one reaction counter; returns (post owner, new count)."""
        row = (await db.execute(_REACT_SQL[reaction], {"post_id": post_id})).fetchone()
        return (str(row.user_id), int(row.count)) if row else None

    # --- comments ---

    async def add_comment(
        self, db: AsyncSession, post_id: str, user_id: str, content: str
    ) -> Comment:
        row = (
            await db.execute(
                _INSERT_COMMENT_SQL,
                {"post_id": post_id, "user_id": user_id, "content": content},
            )
        ).fetchone()
        comment = await self.get_comment(db, str(row.id))  # type: ignore[union-attr]
        assert comment is not None
        return comment

    async def get_comment(self, db: AsyncSession, comment_id: str) -> Comment | None:
        row = (await db.execute(_GET_COMMENT_SQL, {"comment_id": comment_id})).fetchone()
        return _row_to_comment(row) if row else None

    async def list_comments(self, db: AsyncSession, post_id: str) -> list[Comment]:
        result = await db.execute(_LIST_COMMENTS_SQL, {"post_id": post_id})
        return [_row_to_comment(r) for r in result.fetchall()]

    async def delete_comment(self, db: AsyncSession, comment_id: str) -> bool:
        row = (await db.execute(_DELETE_COMMENT_SQL, {"comment_id": comment_id})).fetchone()
        return row is not None

    # --- follows ---

    async def profile_exists(self, db: AsyncSession, user_id: str) -> bool:
        return (await db.execute(_PROFILE_EXISTS_SQL, {"user_id": user_id})).fetchone() is not None

    async def follow(self, db: AsyncSession, follower_id: str, following_id: str) -> bool:
        """Insert the edge; False if it already existed."""
        row = (
            await db.execute(
                _FOLLOW_SQL, {"follower_id": follower_id, "following_id": following_id}
            )
        ).fetchone()
        return row is not None

    async def unfollow(self, db: AsyncSession, follower_id: str, following_id: str) -> bool:
        row = (
            await db.execute(
                _UNFOLLOW_SQL, {"follower_id": follower_id, "following_id": following_id}
            )
        ).fetchone()
        return row is not None

    async def is_following(self, db: AsyncSession, follower_id: str, following_id: str) -> bool:
        row = (
            await db.execute(
                _IS_FOLLOWING_SQL, {"follower_id": follower_id, "following_id": following_id}
            )
        ).fetchone()
        return row is not None

    async def follower_count(self, db: AsyncSession, user_id: str) -> int:
        return int((await db.execute(_FOLLOWER_COUNT_SQL, {"user_id": user_id})).scalar_one())
