from __future__ import annotations

from collections.abc import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.profiles import Profile


class ProfilesRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, profile_id: UUID) -> Profile | None:
        return await session.get(Profile, profile_id)

    @staticmethod
    async def list_by_ids(session: AsyncSession, profile_ids: Sequence[UUID]) -> list[Profile]:
        ids = tuple(set(profile_ids))
        if not ids:
            return []
        stmt = select(Profile).where(Profile.id.in_(ids))
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(
        session: AsyncSession,
        *,
        profile_id: UUID,
        role: str = "FAN",
        display_name: str | None = None,
        is_banned: bool = False,
        blocked_countries: Sequence[str] = (),
    ) -> Profile:
        profile = Profile(
            id=profile_id,
            role=role,
            display_name=display_name,
            is_banned=is_banned,
            blocked_countries=[code.upper() for code in blocked_countries],
        )
        session.add(profile)
        await session.flush()
        return profile
