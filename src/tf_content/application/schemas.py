"""Pydantic request/response schemas for tf_content."""

from pydantic import BaseModel, Field, field_validator

from src.tf_common.datetime_utils import to_iso
from src.tf_common.enums import ReactionType
from src.tf_content.domain.models import Comment, Post
from src.tf_profile.domain.models import default_name

POST_MAX_LENGTH = 5000
COMMENT_MAX_LENGTH = 2000


class _ContentRequest(BaseModel):
    content: str

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Content must not be blank")
        return v


class CreatePostRequest(_ContentRequest):
    content: str = Field(..., min_length=1, max_length=POST_MAX_LENGTH)


class UpdatePostRequest(CreatePostRequest):
    pass


class ReactRequest(BaseModel):
    reaction: ReactionType


class CreateCommentRequest(_ContentRequest):
    content: str = Field(..., min_length=1, max_length=COMMENT_MAX_LENGTH)


class AuthorInfo(BaseModel):
    user_id: str
    name: str
    email: str | None
    avatar_url: str | None


def _author(user_id: str, email: str | None, name: str | None, avatar: str | None) -> AuthorInfo:
    if not name and email:
        name = default_name(email)
    return AuthorInfo(user_id=user_id, name=name or "unknown", email=email, avatar_url=avatar)


class PostItem(BaseModel):
    id: str
    content: str
    type: str
    views: int
    likes: int
    hearts: int
    hahas: int
    sponsored: bool
    author: AuthorInfo
    created_at: str | None
    updated_at: str | None

    @classmethod
    def from_domain(cls, p: Post) -> "PostItem":
        return cls(
            id=p.id,
            content=p.content,
            type=p.type,
            views=p.views,
            likes=p.likes,
            hearts=p.hearts,
            hahas=p.hahas,
            sponsored=p.sponsored,
            author=_author(p.user_id, p.author_email, p.author_name, p.author_avatar),
            created_at=to_iso(p.created_at),
            updated_at=to_iso(p.updated_at),
        )


class PostListResponse(BaseModel):
    items: list[PostItem]
    next_cursor: str | None
    has_more: bool


class ReactionResponse(BaseModel):
    post_id: str
    reaction: str
    count: int


class ViewResponse(BaseModel):
    post_id: str
    views: int


class CommentItem(BaseModel):
    id: str
    post_id: str
    content: str
    author: AuthorInfo
    created_at: str | None

    @classmethod
    def from_domain(cls, c: Comment) -> "CommentItem":
        return cls(
            id=c.id,
            post_id=c.post_id,
            content=c.content,
            author=_author(c.user_id, c.author_email, c.author_name, c.author_avatar),
            created_at=to_iso(c.created_at),
        )


class FollowStatusResponse(BaseModel):
    user_id: str
    following: bool


class FollowerCountResponse(BaseModel):
    user_id: str
    followers: int
