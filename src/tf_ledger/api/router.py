"""tf_ledger REST API — wallet and creator earnings, JWT required."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from src.tf_common.database import get_db_session
from src.tf_common.enums import TransactionKind
from src.tf_common.response import ApiResponse, routed_response
from src.tf_gateway.auth.dependencies import get_current_profile
from src.tf_ledger.application.schemas import DepositRequest, WithdrawRequest
from src.tf_ledger.application.service import LedgerApplicationService
from src.tf_profile.domain.models import Profile

router = APIRouter(prefix="/wallet", tags=["wallet"])

_service = LedgerApplicationService()


@router.get("/balance")
async def get_balance(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.get_balance(db, profile.id)
    return routed_response(request, data.model_dump())


@router.post("/deposit")
async def deposit(
    body: DepositRequest,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.deposit(db, profile.id, body.amount_micros, body.network)
    return routed_response(request, data.model_dump())


@router.post("/withdraw")
async def request_withdraw(
    body: WithdrawRequest,
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.request_withdraw(db, profile.id, body.amount_micros, body.network)
    return routed_response(request, data.model_dump(), "Withdrawal pending approval")


@router.get("/transactions")
async def list_transactions(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
    cursor: str | None = Query(None, description="Pagination cursor (opaque Base64)"),
    limit: int = Query(20, ge=1, le=100, description="Items per page"),
    kind: TransactionKind | None = Query(None, description="Filter by TransactionKind"),
) -> ApiResponse:
    data = await _service.list_transactions(
        db, profile.id, cursor, limit, kind.value if kind else None
    )
    return routed_response(request, data.model_dump())


@router.get("/earnings")
async def estimate_earnings(
    profile: Annotated[Profile, Depends(get_current_profile)],
    db: Annotated[AsyncSession, Depends(get_db_session)],
    request: Request,
) -> ApiResponse:
    data = await _service.estimate_earnings(db, profile.id)
    return routed_response(request, data.model_dump())
