"""tf_content REST API — per-user posts and the follow graph."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_content.application.service import ContentApplicationService
from src.tf_gateway.auth.dependencies import get_current_profile
from src.tf_profile.domain.models import Profile

router = APIRouter(prefix="/users", tags=["follows"])

_service = ContentApplicationService()


@router.get("/{user_id}/posts")
async def list_user_posts(
    user_id: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
) -> ApiResponse:
    data = await _service.list_posts(db, cursor, limit, user_id=user_id)
    return routed_response(request, data.model_dump())


@router.post("/{user_id}/follow")
async def follow(
    user_id: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.follow(db, profile, user_id)
    return routed_response(request, data.model_dump())


@router.delete("/{user_id}/follow")
async def unfollow(
    user_id: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.unfollow(db, profile, user_id)
    return routed_response(request, data.model_dump())


@router.get("/{user_id}/follow")
async def follow_status(
    user_id: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.follow_status(db, profile, user_id)
    return routed_response(request, data.model_dump())


@router.get("/{user_id}/followers/count")
async def follower_count(
    user_id: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.follower_count(db, profile, user_id)
    return routed_response(request, data.model_dump())
