from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.unlocks import Unlock


class UnlocksRepo:
    @staticmethod
    async def get_by_user_post(
        session: AsyncSession,
        *,
        user_id: UUID,
        post_id: UUID,
    ) -> Unlock | None:
        stmt = select(Unlock).where(Unlock.user_id == user_id, Unlock.post_id == post_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def exists(session: AsyncSession, *, user_id: UUID, post_id: UUID) -> bool:
        stmt = select(Unlock.id).where(Unlock.user_id == user_id, Unlock.post_id == post_id)
        result = await session.execute(stmt)
        return result.scalar_one_or_none() is not None

    @staticmethod
    async def list_unlocked_post_ids(
        session: AsyncSession,
        *,
        user_id: UUID,
        post_ids: Sequence[UUID],
    ) -> set[UUID]:
        ids = tuple(set(post_ids))
        if not ids:
            return set()
        stmt = select(Unlock.post_id).where(Unlock.user_id == user_id, Unlock.post_id.in_(ids))
        result = await session.execute(stmt)
        return set(result.scalars().all())

    @staticmethod
    async def list_by_user(session: AsyncSession, *, user_id: UUID, limit: int = 50) -> list[Unlock]:
        stmt = (
            select(Unlock)
            .where(Unlock.user_id == user_id)
            .order_by(Unlock.created_at.desc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(session: AsyncSession, *, unlock: Unlock) -> Unlock:
        session.add(unlock)
        await session.flush()
        return unlock
