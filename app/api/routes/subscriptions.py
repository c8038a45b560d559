from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_viewer_id, require_user_id
from app.api.models import (
    SubscribeResponse,
    SubscribersResponse,
    SubscriptionResponse,
    SubscriptionStatusResponse,
    SuccessResponse,
)
from app.db.session import SessionLocal
from app.paywall.subscriptions.errors import (
    SubscriptionTargetNotFoundError,
    SubscriptionValidationError,
)
from app.paywall.subscriptions.service import SubscriptionService
from app.paywall.subscriptions.types import SubscriptionView

router = APIRouter(tags=["subscriptions"])


def _as_subscription_response(view: SubscriptionView) -> SubscriptionResponse:
    return SubscriptionResponse(
        subscriber_id=view.subscriber_id,
        creator_id=view.creator_id,
        status=view.status,
        starts_at=view.starts_at,
        ends_at=view.ends_at,
        canceled_at=view.canceled_at,
        is_active=view.is_active,
    )


@router.post("/api/subscriptions/{creator_id}", response_model=SubscribeResponse)
async def subscribe(
    creator_id: UUID,
    user_id: UUID = Depends(require_user_id),
) -> SubscribeResponse:
    try:
        async with SessionLocal.begin() as session:
            view = await SubscriptionService.subscribe(
                session,
                subscriber_id=user_id,
                creator_id=creator_id,
                now_utc=datetime.now(timezone.utc),
            )
    except SubscriptionTargetNotFoundError as exc:
        raise HTTPException(status_code=404, detail={"code": "E_CREATOR_NOT_FOUND"}) from exc
    except SubscriptionValidationError as exc:
        raise HTTPException(status_code=400, detail={"code": "E_SELF_SUBSCRIPTION"}) from exc
    return SubscribeResponse(success=True, subscription=_as_subscription_response(view))


@router.post("/api/subscriptions/{creator_id}/cancel", response_model=SuccessResponse)
async def cancel_subscription(
    creator_id: UUID,
    user_id: UUID = Depends(require_user_id),
) -> SuccessResponse:
    async with SessionLocal.begin() as session:
        canceled = await SubscriptionService.cancel(
            session,
            subscriber_id=user_id,
            creator_id=creator_id,
            now_utc=datetime.now(timezone.utc),
        )
    if not canceled:
        raise HTTPException(status_code=404, detail={"code": "E_SUBSCRIPTION_NOT_FOUND"})
    return SuccessResponse(success=True)


@router.get("/api/subscriptions/{creator_id}/status", response_model=SubscriptionStatusResponse)
async def subscription_status(
    creator_id: UUID,
    viewer_id: UUID | None = Depends(get_viewer_id),
) -> SubscriptionStatusResponse:
    async with SessionLocal.begin() as session:
        is_subscribed = await SubscriptionService.is_active(
            session,
            subscriber_id=viewer_id,
            creator_id=creator_id,
            now_utc=datetime.now(timezone.utc),
        )
    return SubscriptionStatusResponse(is_subscribed=is_subscribed)


@router.get("/api/creator/subscribers", response_model=SubscribersResponse)
async def list_subscribers(
    limit: int = Query(default=100, ge=1, le=500),
    user_id: UUID = Depends(require_user_id),
) -> SubscribersResponse:
    async with SessionLocal.begin() as session:
        views = await SubscriptionService.list_subscribers(
            session,
            creator_id=user_id,
            now_utc=datetime.now(timezone.utc),
            limit=limit,
        )
    return SubscribersResponse(
        subscribers=[_as_subscription_response(view) for view in views],
        active_count=sum(1 for view in views if view.is_active),
    )
