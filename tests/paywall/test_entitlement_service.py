from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.paywall.entitlements import access, service
from app.paywall.entitlements.types import PostAccessView, Visibility

UTC = timezone.utc
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def _view(creator_id, visibility: Visibility, price_cents: int = 0) -> PostAccessView:
    return PostAccessView(
        post_id=uuid4(),
        creator_id=creator_id,
        visibility=visibility,
        price_cents=price_cents,
    )


@pytest.mark.asyncio
async def test_can_view_ppv_only_consults_unlocks(monkeypatch) -> None:
    creator_id = uuid4()
    viewer_id = uuid4()
    post = _view(creator_id, Visibility.PPV, 500)
    calls: list[str] = []

    async def _fake_exists(session, *, user_id, post_id):
        calls.append("unlock")
        assert (user_id, post_id) == (viewer_id, post.post_id)
        return True

    async def _fake_has_active(session, **kwargs):
        calls.append("subscription")
        return True

    monkeypatch.setattr(service.UnlocksRepo, "exists", _fake_exists)
    monkeypatch.setattr(service.SubscriptionsRepo, "has_active", _fake_has_active)

    allowed = await service.EntitlementService.can_view(
        object(),
        viewer_id=viewer_id,
        post=post,
        now_utc=NOW,
    )

    assert allowed is True
    assert calls == ["unlock"]


@pytest.mark.asyncio
async def test_can_view_free_post_skips_lookups(monkeypatch) -> None:
    async def _unexpected(*args, **kwargs):
        raise AssertionError("no lookup expected")

    monkeypatch.setattr(service.UnlocksRepo, "exists", _unexpected)
    monkeypatch.setattr(service.SubscriptionsRepo, "has_active", _unexpected)

    allowed = await service.EntitlementService.can_view(
        object(),
        viewer_id=None,
        post=_view(uuid4(), Visibility.FREE),
        now_utc=NOW,
    )
    assert allowed is True


@pytest.mark.asyncio
async def test_resolve_many_batches_facts(monkeypatch) -> None:
    viewer_id = uuid4()
    subscribed_creator = uuid4()
    other_creator = uuid4()
    free_post = _view(other_creator, Visibility.FREE)
    subs_ok = _view(subscribed_creator, Visibility.SUBSCRIBERS)
    subs_no = _view(other_creator, Visibility.SUBSCRIBERS)
    ppv_ok = _view(other_creator, Visibility.PPV, 300)
    ppv_no = _view(other_creator, Visibility.PPV, 300)
    own_ppv = _view(viewer_id, Visibility.PPV, 300)
    captured: dict[str, object] = {}

    async def _fake_active_creators(session, *, subscriber_id, now_utc):
        captured["subscriber_id"] = subscriber_id
        return {subscribed_creator}

    async def _fake_unlocked(session, *, user_id, post_ids):
        captured["post_ids"] = set(post_ids)
        return {ppv_ok.post_id}

    monkeypatch.setattr(service.SubscriptionsRepo, "list_active_creator_ids", _fake_active_creators)
    monkeypatch.setattr(service.UnlocksRepo, "list_unlocked_post_ids", _fake_unlocked)

    result = await service.EntitlementService.resolve_many(
        object(),
        viewer_id=viewer_id,
        posts=[free_post, subs_ok, subs_no, ppv_ok, ppv_no, own_ppv],
        now_utc=NOW,
    )

    assert result == {
        free_post.post_id: True,
        subs_ok.post_id: True,
        subs_no.post_id: False,
        ppv_ok.post_id: True,
        ppv_no.post_id: False,
        own_ppv.post_id: True,
    }
    assert captured["subscriber_id"] == viewer_id
    assert captured["post_ids"] == {ppv_ok.post_id, ppv_no.post_id}


@pytest.mark.asyncio
async def test_resolve_many_for_anonymous_viewer_runs_no_queries(monkeypatch) -> None:
    async def _unexpected(*args, **kwargs):
        raise AssertionError("no lookup expected")

    monkeypatch.setattr(service.SubscriptionsRepo, "list_active_creator_ids", _unexpected)
    monkeypatch.setattr(service.UnlocksRepo, "list_unlocked_post_ids", _unexpected)
    creator_id = uuid4()
    posts = [_view(creator_id, Visibility.FREE), _view(creator_id, Visibility.PPV, 100)]

    result = await service.EntitlementService.resolve_many(
        object(),
        viewer_id=None,
        posts=posts,
        now_utc=NOW,
    )
    assert result == {posts[0].post_id: True, posts[1].post_id: False}


def test_is_creator_hidden_rules() -> None:
    creator = SimpleNamespace(id=uuid4(), is_banned=False, blocked_countries=["DE"])
    banned = SimpleNamespace(id=uuid4(), is_banned=True, blocked_countries=[])
    fan_id = uuid4()

    assert access.is_creator_hidden(None, viewer_id=fan_id, visitor_country=None) is True
    assert access.is_creator_hidden(creator, viewer_id=fan_id, visitor_country="DE") is True
    assert access.is_creator_hidden(creator, viewer_id=fan_id, visitor_country="US") is False
    assert access.is_creator_hidden(creator, viewer_id=fan_id, visitor_country=None) is False
    assert access.is_creator_hidden(creator, viewer_id=creator.id, visitor_country="DE") is False
    assert access.is_creator_hidden(banned, viewer_id=fan_id, visitor_country=None) is True
    assert access.is_creator_hidden(banned, viewer_id=banned.id, visitor_country=None) is False


def _post_row(creator_id, *, visibility: str = "SUBSCRIBERS", is_deleted: bool = False):
    return SimpleNamespace(
        id=uuid4(),
        creator_id=creator_id,
        visibility=visibility,
        price_cents=0,
        is_deleted=is_deleted,
    )


@pytest.mark.asyncio
async def test_check_access_reports_geo_blocked_post_as_not_found(monkeypatch) -> None:
    creator = SimpleNamespace(id=uuid4(), is_banned=False, blocked_countries=["DE"])
    post = _post_row(creator.id, visibility="FREE")

    async def _fake_get_post(session, post_id):
        return post

    async def _fake_get_profile(session, profile_id):
        return creator

    monkeypatch.setattr(access.PostsRepo, "get_by_id", _fake_get_post)
    monkeypatch.setattr(access.ProfilesRepo, "get_by_id", _fake_get_profile)

    blocked = await access.AccessService.check_access(
        object(),
        viewer_id=uuid4(),
        post_id=post.id,
        visitor_country="de",
        now_utc=NOW,
    )
    allowed = await access.AccessService.check_access(
        object(),
        viewer_id=None,
        post_id=post.id,
        visitor_country=None,
        now_utc=NOW,
    )

    assert (blocked.found, blocked.can_view) == (False, False)
    assert (allowed.found, allowed.can_view) == (True, True)


@pytest.mark.asyncio
async def test_check_access_missing_and_deleted_posts(monkeypatch) -> None:
    creator = SimpleNamespace(id=uuid4(), is_banned=False, blocked_countries=[])
    deleted = _post_row(creator.id, is_deleted=True)
    posts = {deleted.id: deleted}

    async def _fake_get_post(session, post_id):
        return posts.get(post_id)

    async def _fake_get_profile(session, profile_id):
        return creator

    monkeypatch.setattr(access.PostsRepo, "get_by_id", _fake_get_post)
    monkeypatch.setattr(access.ProfilesRepo, "get_by_id", _fake_get_profile)

    missing = await access.AccessService.check_access(
        object(), viewer_id=uuid4(), post_id=uuid4(), visitor_country=None, now_utc=NOW
    )
    as_fan = await access.AccessService.check_access(
        object(), viewer_id=uuid4(), post_id=deleted.id, visitor_country=None, now_utc=NOW
    )
    as_owner = await access.AccessService.check_access(
        object(), viewer_id=creator.id, post_id=deleted.id, visitor_country=None, now_utc=NOW
    )

    assert missing.found is False
    assert as_fan.found is False
    assert (as_owner.found, as_owner.can_view) == (True, True)
