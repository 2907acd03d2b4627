"""Admin REST API — every endpoint requires an ADMIN profile."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_admin.application.service import AdminService
from src.tf_common.database import get_db_session
from src.tf_common.response import ApiResponse, routed_response
from src.tf_gateway.auth.dependencies import require_admin
from src.tf_ledger.application.schemas import ProcessWithdrawalRequest
from src.tf_profile.application.schemas import AdminUpdateUserRequest
from src.tf_profile.domain.models import Profile
from src.tf_settings.application.schemas import UpdateSettingsRequest

router = APIRouter(prefix="/admin", tags=["admin"])
_service = AdminService()

AdminProfile = Annotated[Profile, Depends(require_admin)]
DbSession = Annotated[AsyncSession, Depends(get_db_session)]


@router.get("/users")
async def list_users(
    admin: AdminProfile,
    db: DbSession,
    request: Request,
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
) -> ApiResponse:
    items = await _service.list_users(db, limit, offset)
    return routed_response(request, [u.model_dump() for u in items])


@router.patch("/users/{user_id}")
async def update_user(
    user_id: str,
    body: AdminUpdateUserRequest,
    admin: AdminProfile,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    data = await _service.update_user(db, user_id, body)
    return routed_response(request, data.model_dump())


@router.post("/users/{user_id}/grant-admin")
async def grant_admin(
    user_id: str, admin: AdminProfile, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.grant_admin(db, user_id)
    return routed_response(request, data.model_dump())


@router.get("/withdrawals/pending")
async def pending_withdrawals(
    admin: AdminProfile,
    db: DbSession,
    request: Request,
    limit: int = Query(100, ge=1, le=500),
) -> ApiResponse:
    items = await _service.pending_withdrawals(db, limit)
    return routed_response(request, [t.model_dump() for t in items])


@router.post("/withdrawals/{tx_id}/process")
async def process_withdrawal(
    tx_id: str,
    body: ProcessWithdrawalRequest,
    admin: AdminProfile,
    db: DbSession,
    request: Request,
) -> ApiResponse:
    data = await _service.process_withdrawal(db, tx_id, body.approved)
    return routed_response(request, data.model_dump())


@router.get("/ledger/reconcile")
async def reconcile(
    admin: AdminProfile,
    db: DbSession,
    request: Request,
    user_id: str | None = Query(None, description="Check one user; all users if omitted"),
) -> ApiResponse:
    data = await _service.reconcile(db, user_id)
    return routed_response(request, data.model_dump())


@router.put("/settings")
async def update_settings(
    body: UpdateSettingsRequest, admin: AdminProfile, db: DbSession, request: Request
) -> ApiResponse:
    data = await _service.update_settings(db, body)
    return routed_response(request, data.model_dump(), "Settings updated")


@router.post("/sample-posts", status_code=status.HTTP_201_CREATED)
async def publish_sample_posts(admin: AdminProfile, db: DbSession, request: Request) -> ApiResponse:
    items = await _service.publish_sample_posts(db, admin)
    return routed_response(request, [p.model_dump() for p in items])
