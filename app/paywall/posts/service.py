from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.posts import Post
from app.db.repo.posts_repo import PostsRepo
from app.db.repo.profiles_repo import ProfilesRepo
from app.paywall.entitlements.access import is_creator_hidden
from app.paywall.entitlements.service import EntitlementService, as_access_view
from app.paywall.posts.errors import PostNotFoundError, PostPermissionError, PostValidationError
from app.paywall.posts.rules import validate_title, validate_visibility_price
from app.paywall.posts.types import PostListItem

logger = structlog.get_logger(__name__)


async def _get_owned_post_for_update(
    session: AsyncSession,
    *,
    creator_id: UUID,
    post_id: UUID,
) -> Post:
    post = await PostsRepo.get_by_id_for_update(session, post_id)
    if post is None:
        raise PostNotFoundError
    if post.creator_id != creator_id:
        raise PostPermissionError
    return post


class PostService:
    @staticmethod
    async def create_post(
        session: AsyncSession,
        *,
        creator_id: UUID,
        title: str | None,
        body: str,
        visibility: str,
        price_cents: int,
        now_utc: datetime,
    ) -> Post:
        creator = await ProfilesRepo.get_by_id(session, creator_id)
        if creator is None or creator.role != "CREATOR" or creator.is_banned:
            raise PostPermissionError

        resolved = validate_visibility_price(visibility=visibility, price_cents=price_cents)
        post = await PostsRepo.create(
            session,
            post=Post(
                id=uuid4(),
                creator_id=creator_id,
                title=validate_title(title),
                body=body,
                visibility=resolved.value,
                price_cents=price_cents,
                is_deleted=False,
                deleted_at=None,
                created_at=now_utc,
                updated_at=now_utc,
            ),
        )
        logger.info(
            "post_created",
            post_id=str(post.id),
            creator_id=str(creator_id),
            visibility=post.visibility,
            price_cents=post.price_cents,
        )
        return post

    @staticmethod
    async def update_post_content(
        session: AsyncSession,
        *,
        creator_id: UUID,
        post_id: UUID,
        title: str | None,
        body: str | None,
        now_utc: datetime,
    ) -> Post:
        # Visibility and price are fixed at creation: existing unlocks were paid against them.
        post = await _get_owned_post_for_update(session, creator_id=creator_id, post_id=post_id)
        if post.is_deleted:
            raise PostNotFoundError
        if title is None and body is None:
            raise PostValidationError("nothing to update")

        if title is not None:
            post.title = validate_title(title)
        if body is not None:
            post.body = body
        post.updated_at = now_utc
        await session.flush()
        return post

    @staticmethod
    async def soft_delete_post(
        session: AsyncSession,
        *,
        creator_id: UUID,
        post_id: UUID,
        now_utc: datetime,
    ) -> Post:
        post = await _get_owned_post_for_update(session, creator_id=creator_id, post_id=post_id)
        if not post.is_deleted:
            post.is_deleted = True
            post.deleted_at = now_utc
            post.updated_at = now_utc
            await session.flush()
            logger.info("post_soft_deleted", post_id=str(post_id), creator_id=str(creator_id))
        return post

    @staticmethod
    async def list_creator_posts(
        session: AsyncSession,
        *,
        creator_id: UUID,
        viewer_id: UUID | None,
        visitor_country: str | None,
        now_utc: datetime,
        limit: int = 50,
    ) -> list[PostListItem]:
        creator = await ProfilesRepo.get_by_id(session, creator_id)
        if is_creator_hidden(creator, viewer_id=viewer_id, visitor_country=visitor_country):
            return []

        is_owner = viewer_id is not None and viewer_id == creator_id
        posts = await PostsRepo.list_by_creator(
            session,
            creator_id=creator_id,
            include_deleted=is_owner,
            limit=limit,
        )
        access = await EntitlementService.resolve_many(
            session,
            viewer_id=viewer_id,
            posts=[as_access_view(post) for post in posts],
            now_utc=now_utc,
        )

        items: list[PostListItem] = []
        for post in posts:
            allowed = access.get(post.id, False)
            items.append(
                PostListItem(
                    post_id=post.id,
                    creator_id=post.creator_id,
                    title=post.title,
                    body=post.body if allowed else None,
                    visibility=post.visibility,
                    price_cents=post.price_cents,
                    is_deleted=post.is_deleted,
                    created_at=post.created_at,
                    can_view=allowed,
                )
            )
        return items
