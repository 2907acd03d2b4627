"""tf_profile REST API — own profile and public profiles."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_gateway.auth.dependencies import get_current_profile
from src.tf_profile.application.schemas import ProfileResponse, UpdateProfileRequest
from src.tf_profile.application.service import ProfileService
from src.tf_profile.domain.models import Profile

router = APIRouter(prefix="/profiles", tags=["profiles"])

_service = ProfileService()


@router.get("/me")
async def get_me(
    profile: Annotated[Profile, Depends(get_current_profile)],
    request: Request,
) -> ApiResponse:
    return routed_response(request, ProfileResponse.from_domain(profile).model_dump())


@router.patch("/me")
async def update_me(
    body: UpdateProfileRequest,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.update_me(db, profile, body)
    return routed_response(request, data.model_dump())


@router.get("/{user_id}")
async def get_profile(
    user_id: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_public(db, user_id, viewer=profile)
    return routed_response(request, data.model_dump())
