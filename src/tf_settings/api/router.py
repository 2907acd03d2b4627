"""tf_settings REST API — public site configuration (no authentication)."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_settings.application.service import SettingsApplicationService

router = APIRouter(prefix="/settings", tags=["settings"])

_service = SettingsApplicationService()


@router.get("")
async def get_settings(
    request: Request,
    db: Annotated[AsyncSession, Depends(get_db_session)],
) -> ApiResponse:
    data = await _service.get_settings(db)
    return routed_response(request, data.model_dump())
