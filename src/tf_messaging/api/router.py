"""tf_messaging REST API — conversations and threads, JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_gateway.auth.dependencies import get_current_profile
from src.tf_messaging.application.schemas import SendMessageRequest
from src.tf_messaging.application.service import MessagingApplicationService
from src.tf_profile.domain.models import Profile

router = APIRouter(prefix="/messages", tags=["messages"])

_service = MessagingApplicationService()


@router.get("/conversations")
async def list_conversations(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _service.list_conversations(db, profile.id)
    return routed_response(request, [c.model_dump() for c in items])


@router.get("/{other_id}")
async def get_thread(
    other_id: str,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _service.get_thread(db, profile.id, other_id)
    return routed_response(request, [m.model_dump() for m in items])


@router.post("/{other_id}", status_code=status.HTTP_201_CREATED)
async def send_message(
    other_id: str,
    body: SendMessageRequest,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.send(db, profile.id, other_id, body.content)
    return routed_response(request, data.model_dump())
