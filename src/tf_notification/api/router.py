"""tf_notification REST API — latest notifications and read markers."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_gateway.auth.dependencies import get_current_profile
from src.tf_notification.application.schemas import MarkAllReadResponse
from src.tf_notification.application.service import NotificationApplicationService
from src.tf_profile.domain.models import Profile

router = APIRouter(prefix="/notifications", tags=["notifications"])

_service = NotificationApplicationService()


@router.get("")
async def list_notifications(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.list_notifications(db, profile.id)
    return routed_response(request, data.model_dump())


@router.post("/read-all")
async def mark_all_read(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    marked = await _service.mark_all_read(db, profile.id)
    return routed_response(request, MarkAllReadResponse(marked=marked).model_dump())


@router.post("/{notification_id}/read")
async def mark_read(
    notification_id: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    await _service.mark_read(db, profile.id, notification_id)
    return routed_response(request, {"id": notification_id, "is_read": True})
