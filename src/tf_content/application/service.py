"""ContentApplicationService — posts, reactions, views, comments, follows.

Row-level rules are explicit here: posts are edited/deleted by their owner
or an admin, comments deleted by their author or an admin. Notifications are
published only after the triggering transaction has committed.
"""

import logging
from collections.abc import Callable

from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.enums import NotificationType, ReactionType
from src.tf_common.errors import (
    AlreadyFollowingError,
    CannotFollowSelfError,
    CommentNotFoundError,
    ForbiddenError,
    NotFollowingError,
    PostNotFoundError,
    ProfileNotFoundError,
)
from src.tf_common.pagination import cursor_decode, cursor_encode
from src.tf_content.application.schemas import (
    CommentItem,
    FollowerCountResponse,
    FollowStatusResponse,
    PostItem,
    PostListResponse,
    ReactionResponse,
    ViewResponse,
)
from src.tf_content.domain.models import Post, detect_post_type
from src.tf_content.infrastructure.persistence import ContentRepository
from src.tf_notification.application.service import dispatcher
from src.tf_notification.domain.models import NotificationEvent
from src.tf_profile.domain.models import Profile

logger = logging.getLogger(__name__)

Publisher = Callable[[NotificationEvent], bool]


class ContentApplicationService:
    def __init__(
        self,
        repo: ContentRepository | None = None,
        publish: Publisher | None = None,
    ) -> None:
        self._repo = repo or ContentRepository()
        self._publish = publish or dispatcher.publish

    async def _require_post(self, db: AsyncSession, post_id: str) -> Post:
        post = await self._repo.get_post(db, post_id)
        if post is None:
            raise PostNotFoundError(post_id)
        return post

    # ------------------------------------------------------------------
    # Posts
    # ------------------------------------------------------------------

    async def create_post(self, db: AsyncSession, author: Profile, content: str) -> PostItem:
        try:
            post = await self._repo.create_post(
                db, author.id, content, detect_post_type(content).value
            )
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PostItem.from_domain(post)

    async def get_post(self, db: AsyncSession, post_id: str) -> PostItem:
        return PostItem.from_domain(await self._require_post(db, post_id))

    async def list_posts(
        self,
        db: AsyncSession,
        cursor: str | None,
        limit: int,
        user_id: str | None = None,
    ) -> PostListResponse:
        """Newest first; `user_id` narrows the feed to one author."""
        cursor_ts, cursor_id = cursor_decode(cursor)
        rows = await self._repo.list_posts(db, user_id, cursor_ts, cursor_id, limit + 1)
        has_more = len(rows) > limit
        page = rows[:limit]
        next_cursor = None
        if has_more and page and page[-1].created_at is not None:
            next_cursor = cursor_encode(page[-1].created_at, page[-1].id)
        return PostListResponse(
            items=[PostItem.from_domain(p) for p in page],
            next_cursor=next_cursor,
            has_more=has_more,
        )

    async def update_post(
        self, db: AsyncSession, actor: Profile, post_id: str, content: str
    ) -> PostItem:
        try:
            post = await self._require_post(db, post_id)
            if post.user_id != actor.id and not actor.is_admin:
                raise ForbiddenError("Only the author or an admin can edit this post")
            await self._repo.update_post(db, post_id, content, detect_post_type(content).value)
            updated = await self._require_post(db, post_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return PostItem.from_domain(updated)

    async def delete_post(self, db: AsyncSession, actor: Profile, post_id: str) -> None:
        try:
            post = await self._require_post(db, post_id)
            if post.user_id != actor.id and not actor.is_admin:
                raise ForbiddenError("Only the author or an admin can delete this post")
            await self._repo.delete_post(db, post_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        logger.info("post %s deleted by %s", post_id, actor.id)

    async def react(
        self, db: AsyncSession, actor: Profile, post_id: str, reaction: ReactionType
    ) -> ReactionResponse:
        try:
            result = await self._repo.react(db, post_id, reaction)
            if result is None:
                raise PostNotFoundError(post_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        owner_id, count = result
        self._publish(
            NotificationEvent(
                recipient_id=owner_id,
                actor_id=actor.id,
                type=NotificationType.LIKE.value,
                message="reacted to your post",
                link=f"/post/{post_id}",
            )
        )
        return ReactionResponse(post_id=post_id, reaction=reaction.value, count=count)

    async def record_view(self, db: AsyncSession, post_id: str) -> ViewResponse:
        try:
            views = await self._repo.increment_views(db, post_id)
            if views is None:
                raise PostNotFoundError(post_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return ViewResponse(post_id=post_id, views=views)

    # ------------------------------------------------------------------
    # Comments
    # ------------------------------------------------------------------

    async def list_comments(self, db: AsyncSession, post_id: str) -> list[CommentItem]:
        await self._require_post(db, post_id)
        return [CommentItem.from_domain(c) for c in await self._repo.list_comments(db, post_id)]

    async def add_comment(
        self, db: AsyncSession, actor: Profile, post_id: str, content: str
    ) -> CommentItem:
        try:
            post = await self._require_post(db, post_id)
            comment = await self._repo.add_comment(db, post_id, actor.id, content)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        self._publish(
            NotificationEvent(
                recipient_id=post.user_id,
                actor_id=actor.id,
                type=NotificationType.COMMENT.value,
                message="commented on your post",
                link=f"/post/{post_id}",
            )
        )
        return CommentItem.from_domain(comment)

    async def delete_comment(self, db: AsyncSession, actor: Profile, comment_id: str) -> None:
        try:
            comment = await self._repo.get_comment(db, comment_id)
            if comment is None:
                raise CommentNotFoundError(comment_id)
            if comment.user_id != actor.id and not actor.is_admin:
                raise ForbiddenError("Only the author or an admin can delete this comment")
            await self._repo.delete_comment(db, comment_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise

    # ------------------------------------------------------------------
    # Follows
    # ------------------------------------------------------------------

    async def follow(self, db: AsyncSession, actor: Profile, target_id: str) -> FollowStatusResponse:
        if target_id == actor.id:
            raise CannotFollowSelfError()
        try:
            if not await self._repo.profile_exists(db, target_id):
                raise ProfileNotFoundError(target_id)
            if not await self._repo.follow(db, actor.id, target_id):
                raise AlreadyFollowingError(target_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        self._publish(
            NotificationEvent(
                recipient_id=target_id,
                actor_id=actor.id,
                type=NotificationType.FOLLOW.value,
                message="started following you",
                link=f"/profile/{actor.id}",
            )
        )
        return FollowStatusResponse(user_id=target_id, following=True)

    async def unfollow(
        self, db: AsyncSession, actor: Profile, target_id: str
    ) -> FollowStatusResponse:
        try:
            if not await self._repo.unfollow(db, actor.id, target_id):
                raise NotFollowingError(target_id)
            await db.commit()
        except Exception:
            await db.rollback()
            raise
        return FollowStatusResponse(user_id=target_id, following=False)

    async def follow_status(
        self, db: AsyncSession, actor: Profile, target_id: str
    ) -> FollowStatusResponse:
        following = await self._repo.is_following(db, actor.id, target_id)
        return FollowStatusResponse(user_id=target_id, following=following)

    async def follower_count(
        self, db: AsyncSession, actor: Profile, user_id: str
    ) -> FollowerCountResponse:
        """Follower counts are private to their owner."""
        if user_id != actor.id:
            raise ForbiddenError("Only the profile owner can see their follower count")
        followers = await self._repo.follower_count(db, user_id)
        return FollowerCountResponse(user_id=user_id, followers=followers)
