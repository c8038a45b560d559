from __future__ import annotations

from datetime import datetime
from uuid import UUID

from app.paywall.entitlements.types import PostAccessView, Visibility


def is_subscription_entitled(*, status: str, ends_at: datetime, now_utc: datetime) -> bool:
    # Cancellation revokes access at once: a CANCELED row never entitles,
    # even while its paid term has days left.
    return status == "ACTIVE" and now_utc < ends_at


def can_view(
    viewer_id: UUID | None,
    post: PostAccessView,
    *,
    subscription_active: bool,
    unlocked: bool,
) -> bool:
    if viewer_id is not None and viewer_id == post.creator_id:
        return True
    if post.is_deleted:
        return False
    if post.visibility is Visibility.FREE:
        return True
    if viewer_id is None:
        return False
    if post.visibility is Visibility.SUBSCRIBERS:
        return subscription_active
    if post.visibility is Visibility.PPV:
        return unlocked
    return False


def needs_subscription_fact(viewer_id: UUID | None, post: PostAccessView) -> bool:
    return (
        viewer_id is not None
        and viewer_id != post.creator_id
        and not post.is_deleted
        and post.visibility is Visibility.SUBSCRIBERS
    )


def needs_unlock_fact(viewer_id: UUID | None, post: PostAccessView) -> bool:
    return (
        viewer_id is not None
        and viewer_id != post.creator_id
        and not post.is_deleted
        and post.visibility is Visibility.PPV
    )
