"""tf_content REST API — posts, reactions, views and comments.

All endpoints require JWT authentication.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_content.application.schemas import (
    CreateCommentRequest,
    CreatePostRequest,
    ReactRequest,
    UpdatePostRequest,
)
from src.tf_content.application.service import ContentApplicationService
from src.tf_gateway.auth.dependencies import get_current_profile
from src.tf_profile.domain.models import Profile

router = APIRouter(tags=["content"])

_service = ContentApplicationService()

CurrentProfile = Annotated[Profile, Depends(get_current_profile)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.post("/posts", status_code=status.HTTP_201_CREATED)
async def create_post(
    body: CreatePostRequest, profile: CurrentProfile, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.create_post(db, profile, body.content)
    return routed_response(request, data.model_dump())


@router.get("/posts")
async def get_feed(
    profile: CurrentProfile,
    db: DbSession,
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_posts(db, cursor, limit)
    return routed_response(request, data.model_dump())


@router.get("/posts/{post_id}")
async def get_post(
    post_id: str, profile: CurrentProfile, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.get_post(db, post_id)
    return routed_response(request, data.model_dump())


@router.patch("/posts/{post_id}")
async def update_post(
    post_id: str,
    body: UpdatePostRequest,
    profile: CurrentProfile,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    data = await _service.update_post(db, profile, post_id, body.content)
    return routed_response(request, data.model_dump())


@router.delete("/posts/{post_id}")
async def delete_post(
    post_id: str, profile: CurrentProfile, db: DbSession, request: Request
) -> ApiResponse:
    await _service.delete_post(db, profile, post_id)
    return routed_response(request, {"post_id": post_id}, "Post deleted")


@router.post("/posts/{post_id}/reactions")
async def react_to_post(
    post_id: str,
    body: ReactRequest,
    profile: CurrentProfile,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    data = await _service.react(db, profile, post_id, body.reaction)
    return routed_response(request, data.model_dump())


@router.post("/posts/{post_id}/views")
async def record_view(
    post_id: str, profile: CurrentProfile, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.record_view(db, post_id)
    return routed_response(request, data.model_dump())


@router.get("/posts/{post_id}/comments")
async def list_comments(
    post_id: str, profile: CurrentProfile, db: DbSession, request: Request
) -> ApiResponse:
    items = await _service.list_comments(db, post_id)
    return routed_response(request, [c.model_dump() for c in items])


@router.post("/posts/{post_id}/comments", status_code=status.HTTP_201_CREATED)
async def add_comment(
    post_id: str,
    body: CreateCommentRequest,
    profile: CurrentProfile,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    data = await _service.add_comment(db, profile, post_id, body.content)
    return routed_response(request, data.model_dump())


@router.delete("/comments/{comment_id}")
async def delete_comment(
    comment_id: str, profile: CurrentProfile, db: DbSession, request: Request
) -> ApiResponse:
    await _service.delete_comment(db, profile, comment_id)
    return routed_response(request, {"comment_id": comment_id}, "Comment deleted")
