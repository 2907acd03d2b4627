"""tf_ledger REST API — advertiser side: sponsoring posts and campaigns."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_gateway.auth.dependencies import get_current_profile
from src.tf_ledger.application.schemas import SponsorRequest
from src.tf_ledger.application.service import LedgerApplicationService
from src.tf_profile.domain.models import Profile

router = APIRouter(prefix="/ads", tags=["ads"])

_service = LedgerApplicationService()


@router.post("/posts/{post_id}/sponsor")
async def sponsor_post(
    post_id: str,
    body: SponsorRequest,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.sponsor_post(db, profile.id, post_id, body.amount_micros)
    return routed_response(request, data.model_dump())


@router.get("/campaigns")
async def list_campaigns(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    items = await _service.list_campaigns(db, profile.id)
    return routed_response(request, [c.model_dump() for c in items])
