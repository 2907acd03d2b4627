"""Domain models for tf_content — pure dataclasses, no SQLAlchemy dependency."""

import re
from dataclasses import dataclass
from datetime import datetime

from src.tf_common.enums import PostType

_LINK_RE = re.compile(r"^https?://", re.IGNORECASE)


def detect_post_type(content: str) -> PostType:
    """Content starting with http:// or https:// is a link post."""
    return PostType.LINK if _LINK_RE.match(content.strip()) else PostType.TEXT


@dataclass
class Post:
    id: str
    user_id: str
    content: str
    type: str                   # PostType value
    views: int = 0
    likes: int = 0
    hearts: int = 0
    hahas: int = 0
    sponsored: bool = False
    created_at: datetime | None = None
    updated_at: datetime | None = None
    # Author display fields, joined from profiles at read time
    author_email: str | None = None
    author_name: str | None = None
    author_avatar: str | None = None


@dataclass
class Comment:
    id: str
    post_id: str
    user_id: str
    content: str
    created_at: datetime | None = None
    author_email: str | None = None
    author_name: str | None = None
    author_avatar: str | None = None
