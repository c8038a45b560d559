from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.subscriptions import Subscription


class SubscriptionsRepo:
    @staticmethod
    async def get_by_pair(
        session: AsyncSession,
        *,
        subscriber_id: UUID,
        creator_id: UUID,
    ) -> Subscription | None:
        stmt = select(Subscription).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.creator_id == creator_id,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def has_active(
        session: AsyncSession,
        *,
        subscriber_id: UUID,
        creator_id: UUID,
        now_utc: datetime,
    ) -> bool:
        stmt = select(Subscription.id).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.creator_id == creator_id,
            Subscription.status == "ACTIVE",
            Subscription.ends_at > now_utc,
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_active_creator_ids(
        session: AsyncSession,
        *,
        subscriber_id: UUID,
        now_utc: datetime,
    ) -> set[UUID]:
        stmt = select(Subscription.creator_id).where(
            Subscription.subscriber_id == subscriber_id,
            Subscription.status == "ACTIVE",
            Subscription.ends_at > now_utc,
        )
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def upsert_active(
        session: AsyncSession,
        *,
        subscriber_id: UUID,
        creator_id: UUID,
        starts_at: datetime,
        ends_at: datetime,
        now_utc: datetime,
    ) -> Subscription:
        stmt = (
            insert(Subscription)
            .values(
                subscriber_id=subscriber_id,
                creator_id=creator_id,
                status="ACTIVE",
                starts_at=starts_at,
                ends_at=ends_at,
                canceled_at=None,
                created_at=now_utc,
                updated_at=now_utc,
            )
            .on_conflict_do_update(
                constraint="uq_subscriptions_subscriber_creator",
                set_={
                    "status": "ACTIVE",
                    "starts_at": starts_at,
                    "ends_at": ends_at,
                    "canceled_at": None,
                    "updated_at": now_utc,
                },
            )
            .returning(Subscription)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one()

    @staticmethod
    async def mark_canceled(
        session: AsyncSession,
        *,
        subscriber_id: UUID,
        creator_id: UUID,
        now_utc: datetime,
    ) -> bool:
        stmt = (
            update(Subscription)
            .where(
                Subscription.subscriber_id == subscriber_id,
                Subscription.creator_id == creator_id,
            )
            .values(
                status="CANCELED",
                canceled_at=func.coalesce(Subscription.canceled_at, now_utc),
                updated_at=now_utc,
            )
            .returning(Subscription.id)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_by_creator(
        session: AsyncSession,
        *,
        creator_id: UUID,
        limit: int = 100,
    ) -> list[Subscription]:
        stmt = (
            select(Subscription)
            .where(Subscription.creator_id == creator_id)
            .order_by(Subscription.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
