from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.profiles import Profile
from app.db.repo.posts_repo import PostsRepo
from app.db.repo.profiles_repo import ProfilesRepo
from app.paywall.entitlements.service import EntitlementService, as_access_view
from app.paywall.entitlements.types import NOT_FOUND, AccessDecision
from app.paywall.geo.policy import is_blocked


def is_creator_hidden(
    creator: Profile | None,
    *,
    viewer_id: UUID | None,
    visitor_country: str | None,
) -> bool:
    """Banned, missing or geo-blocking creators look nonexistent to everyone but themselves."""
    if creator is None:
        return True
    if viewer_id is not None and viewer_id == creator.id:
        return False
    if creator.is_banned:
        return True
    return is_blocked(creator.blocked_countries, visitor_country)


class AccessService:
    @staticmethod
    async def check_access(
        session: AsyncSession,
        *,
        viewer_id: UUID | None,
        post_id: UUID,
        visitor_country: str | None,
        now_utc: datetime,
    ) -> AccessDecision:
        post = await PostsRepo.get_by_id(session, post_id)
        if post is None:
            return NOT_FOUND

        creator = await ProfilesRepo.get_by_id(session, post.creator_id)
        if is_creator_hidden(creator, viewer_id=viewer_id, visitor_country=visitor_country):
            return NOT_FOUND

        is_owner = viewer_id is not None and viewer_id == post.creator_id
        if post.is_deleted and not is_owner:
            return NOT_FOUND

        allowed = await EntitlementService.can_view(
            session,
            viewer_id=viewer_id,
            post=as_access_view(post),
            now_utc=now_utc,
        )
        return AccessDecision(found=True, can_view=allowed)
