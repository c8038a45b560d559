from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from app.api.deps import get_visitor_country, require_user_id
from app.api.models import PurchaseListResponse, PurchaseResponse, UnlockRequest, UnlockResponse
from app.db.session import SessionLocal
from app.paywall.unlocks.service import UnlockService
from app.paywall.unlocks.types import REASON_NOT_FOUND, UnlockResult, UnlockStatus

router = APIRouter(tags=["unlocks"])


def _as_unlock_response(result: UnlockResult) -> tuple[int, UnlockResponse]:
    if result.is_entitled:
        return 200, UnlockResponse(
            success=True,
            status=result.status.value,
            unlock_id=result.unlock_id,
            balance_after_cents=result.balance_after_cents,
        )
    if result.status is UnlockStatus.INSUFFICIENT_BALANCE:
        return 402, UnlockResponse(
            success=False,
            status=result.status.value,
            error="insufficient_balance",
        )
    status_code = 404 if result.reason == REASON_NOT_FOUND else 400
    return status_code, UnlockResponse(
        success=False,
        status=result.status.value,
        error=result.reason,
    )


@router.post("/api/unlock", response_model=UnlockResponse)
async def unlock_post(
    payload: UnlockRequest,
    user_id: UUID = Depends(require_user_id),
    visitor_country: str | None = Depends(get_visitor_country),
) -> JSONResponse:
    async with SessionLocal.begin() as session:
        result = await UnlockService.unlock(
            session,
            user_id=user_id,
            post_id=payload.post_id,
            price_cents=payload.price_cents,
            now_utc=datetime.now(timezone.utc),
            visitor_country=visitor_country,
        )

    status_code, response = _as_unlock_response(result)
    return JSONResponse(
        status_code=status_code,
        content=response.model_dump(mode="json", by_alias=True, exclude_none=True),
    )


@router.get("/api/purchases", response_model=PurchaseListResponse)
async def list_purchases(
    limit: int = Query(default=50, ge=1, le=100),
    user_id: UUID = Depends(require_user_id),
) -> PurchaseListResponse:
    async with SessionLocal.begin() as session:
        purchases = await UnlockService.list_purchases(session, user_id=user_id, limit=limit)
    return PurchaseListResponse(
        purchases=[
            PurchaseResponse(
                unlock_id=item.unlock_id,
                post_id=item.post_id,
                creator_id=item.creator_id,
                price_cents=item.price_cents,
                created_at=item.created_at,
            )
            for item in purchases
        ]
    )
