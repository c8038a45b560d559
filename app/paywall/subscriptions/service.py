from __future__ import annotations

from datetime import datetime, timedelta
from uuid import UUID

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.subscriptions import Subscription
from app.db.repo.profiles_repo import ProfilesRepo
from app.db.repo.subscriptions_repo import SubscriptionsRepo
from app.paywall.entitlements.rules import is_subscription_entitled
from app.paywall.subscriptions.errors import (
    SubscriptionTargetNotFoundError,
    SubscriptionValidationError,
)
from app.paywall.subscriptions.types import SubscriptionView

logger = structlog.get_logger(__name__)


def as_subscription_view(subscription: Subscription, *, now_utc: datetime) -> SubscriptionView:
    return SubscriptionView(
        subscriber_id=subscription.subscriber_id,
        creator_id=subscription.creator_id,
        status=subscription.status,
        starts_at=subscription.starts_at,
        ends_at=subscription.ends_at,
        canceled_at=subscription.canceled_at,
        is_active=is_subscription_entitled(
            status=subscription.status,
            ends_at=subscription.ends_at,
            now_utc=now_utc,
        ),
    )


class SubscriptionService:
    @staticmethod
    async def subscribe(
        session: AsyncSession,
        *,
        subscriber_id: UUID,
        creator_id: UUID,
        now_utc: datetime,
    ) -> SubscriptionView:
        if subscriber_id == creator_id:
            raise SubscriptionValidationError

        creator = await ProfilesRepo.get_by_id(session, creator_id)
        if creator is None or creator.role != "CREATOR" or creator.is_banned:
            raise SubscriptionTargetNotFoundError

        term = timedelta(days=get_settings().subscription_term_days)
        subscription = await SubscriptionsRepo.upsert_active(
            session,
            subscriber_id=subscriber_id,
            creator_id=creator_id,
            starts_at=now_utc,
            ends_at=now_utc + term,
            now_utc=now_utc,
        )
        logger.info(
            "subscription_activated",
            subscriber_id=str(subscriber_id),
            creator_id=str(creator_id),
            ends_at=subscription.ends_at.isoformat(),
        )
        return as_subscription_view(subscription, now_utc=now_utc)

    @staticmethod
    async def cancel(
        session: AsyncSession,
        *,
        subscriber_id: UUID,
        creator_id: UUID,
        now_utc: datetime,
    ) -> bool:
        canceled = await SubscriptionsRepo.mark_canceled(
            session,
            subscriber_id=subscriber_id,
            creator_id=creator_id,
            now_utc=now_utc,
        )
        if canceled:
            logger.info(
                "subscription_canceled",
                subscriber_id=str(subscriber_id),
                creator_id=str(creator_id),
            )
        return canceled

    @staticmethod
    async def is_active(
        session: AsyncSession,
        *,
        subscriber_id: UUID | None,
        creator_id: UUID,
        now_utc: datetime,
    ) -> bool:
        if subscriber_id is None:
            return False
        return await SubscriptionsRepo.has_active(
            session,
            subscriber_id=subscriber_id,
            creator_id=creator_id,
            now_utc=now_utc,
        )

    @staticmethod
    async def list_subscribers(
        session: AsyncSession,
        *,
        creator_id: UUID,
        now_utc: datetime,
        limit: int = 100,
    ) -> list[SubscriptionView]:
        subscriptions = await SubscriptionsRepo.list_by_creator(
            session,
            creator_id=creator_id,
            limit=limit,
        )
        return [as_subscription_view(item, now_utc=now_utc) for item in subscriptions]
