"""Auth API router: register, login, refresh.

All endpoints return ApiResponse. request_id is read from request.state
(injected by RequestLogMiddleware).
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from config.settings import settings
from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_gateway.user.schemas import (
    LoginRequest,
    LoginResponse,
    RefreshRequest,
    RefreshResponse,
    RegisterRequest,
    RegisterResponse,
    UserInfo,
)
from src.tf_gateway.user.service import UserService
from src.tf_profile.application.service import ProfileService

router = APIRouter(prefix="/auth", tags=["auth"])
_service = UserService()
_profiles = ProfileService()


@router.post(
    "/register",
    status_code=status.HTTP_201_CREATED,
    response_model=ApiResponse,
    summary="User registration",
)
async def register(
    request: Request,
    body: RegisterRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, profile = await _service.register(body.email, body.password, db)
    data = RegisterResponse(
        user_id=str(user.id),
        email=user.email,
        role=profile.role,
        created_at=user.created_at.isoformat(),
    )
    return routed_response(request, data.model_dump(), "User registered successfully")


@router.post("/login", response_model=ApiResponse, summary="User login")
async def login(
    request: Request,
    body: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    user, tokens = await _service.login(body.email, body.password, db)
    profile = await _profiles.resolve(db, str(user.id), user.email)
    data = LoginResponse(
        access_token=tokens.access_token,
        refresh_token=tokens.refresh_token,
        expires_in=tokens.expires_in,
        user=UserInfo(user_id=str(user.id), email=user.email, role=profile.role),
    )
    return routed_response(request, data.model_dump(), "Login successful")


@router.post("/refresh", response_model=ApiResponse, summary="Refresh access token")
async def refresh_token(request: Request, body: RefreshRequest) -> ApiResponse:
    access_token = await _service.refresh(body.refresh_token)
    data = RefreshResponse(access_token=access_token, expires_in=settings.JWT_EXPIRE_MINUTES * 60)
    return routed_response(request, data.model_dump(), "Token refreshed")
