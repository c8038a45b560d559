from __future__ import annotations

from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.posts import Post


class PostsRepo:
    @staticmethod
    async def get_by_id(session: AsyncSession, post_id: UUID) -> Post | None:
        return await session.get(Post, post_id)

    @staticmethod
    async def get_by_id_for_update(session: AsyncSession, post_id: UUID) -> Post | None:
        stmt = select(Post).where(Post.id == post_id).with_for_update()
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def list_by_creator(
        session: AsyncSession,
        *,
        creator_id: UUID,
        include_deleted: bool = False,
        limit: int = 50,
    ) -> list[Post]:
        stmt = select(Post).where(Post.creator_id == creator_id)
        if not include_deleted:
            stmt = stmt.where(Post.is_deleted.is_(False))
        stmt = stmt.order_by(Post.created_at.desc()).limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def create(session: AsyncSession, *, post: Post) -> Post:
        session.add(post)
        await session.flush()
        return post
