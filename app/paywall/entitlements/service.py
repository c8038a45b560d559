from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.posts import Post
from app.db.repo.subscriptions_repo import SubscriptionsRepo
from app.db.repo.unlocks_repo import UnlocksRepo
from app.paywall.entitlements.rules import can_view, needs_subscription_fact, needs_unlock_fact
from app.paywall.entitlements.types import PostAccessView, Visibility


def as_access_view(post: Post) -> PostAccessView:
    return PostAccessView(
        post_id=post.id,
        creator_id=post.creator_id,
        visibility=Visibility(post.visibility),
        price_cents=post.price_cents,
        is_deleted=post.is_deleted,
    )


class EntitlementService:
    @staticmethod
    async def can_view(
        session: AsyncSession,
        *,
        viewer_id: UUID | None,
        post: PostAccessView,
        now_utc: datetime,
    ) -> bool:
        subscription_active = False
        unlocked = False
        if needs_subscription_fact(viewer_id, post):
            subscription_active = await SubscriptionsRepo.has_active(
                session,
                subscriber_id=viewer_id,
                creator_id=post.creator_id,
                now_utc=now_utc,
            )
        elif needs_unlock_fact(viewer_id, post):
            unlocked = await UnlocksRepo.exists(session, user_id=viewer_id, post_id=post.post_id)

        return can_view(
            viewer_id,
            post,
            subscription_active=subscription_active,
            unlocked=unlocked,
        )

    @staticmethod
    async def resolve_many(
        session: AsyncSession,
        *,
        viewer_id: UUID | None,
        posts: Sequence[PostAccessView],
        now_utc: datetime,
    ) -> dict[UUID, bool]:
        active_creator_ids: set[UUID] = set()
        unlocked_post_ids: set[UUID] = set()

        if viewer_id is not None:
            if any(needs_subscription_fact(viewer_id, post) for post in posts):
                active_creator_ids = await SubscriptionsRepo.list_active_creator_ids(
                    session,
                    subscriber_id=viewer_id,
                    now_utc=now_utc,
                )
            ppv_post_ids = [post.post_id for post in posts if needs_unlock_fact(viewer_id, post)]
            if ppv_post_ids:
                unlocked_post_ids = await UnlocksRepo.list_unlocked_post_ids(
                    session,
                    user_id=viewer_id,
                    post_ids=ppv_post_ids,
                )

        return {
            post.post_id: can_view(
                viewer_id,
                post,
                subscription_active=post.creator_id in active_creator_ids,
                unlocked=post.post_id in unlocked_post_ids,
            )
            for post in posts
        }
