from __future__ import annotations

import asyncio
from datetime import datetime
from uuid import UUID

import pytest

from app.db.session import SessionLocal
from app.paywall.unlocks.service import UnlockService
from app.paywall.unlocks.types import UnlockStatus
from tests.integration.paywall_fixtures import (
    UTC,
    available_balance,
    count_transactions,
    count_unlocks,
    count_wallets,
    create_post,
    create_profile,
    fund_wallet,
)


async def _parallel_unlocks(*, user_id: UUID, post_id: UUID, attempts: int, now_utc: datetime):
    barrier = asyncio.Event()

    async def _attempt() -> UnlockStatus:
        await barrier.wait()
        async with SessionLocal.begin() as session:
            result = await UnlockService.unlock(
                session,
                user_id=user_id,
                post_id=post_id,
                price_cents=500,
                now_utc=now_utc,
            )
        return result.status

    tasks = [asyncio.create_task(_attempt()) for _ in range(attempts)]
    barrier.set()
    return await asyncio.gather(*tasks)


@pytest.mark.asyncio
async def test_two_simultaneous_unlocks_charge_exactly_once() -> None:
    now_utc = datetime.now(UTC)
    creator_id = await create_profile(role="CREATOR")
    fan_id = await create_profile()
    post_id = await create_post(creator_id=creator_id, visibility="PPV", price_cents=500, now_utc=now_utc)
    await fund_wallet(user_id=fan_id, amount_cents=500, now_utc=now_utc)

    outcomes = await _parallel_unlocks(user_id=fan_id, post_id=post_id, attempts=2, now_utc=now_utc)

    assert sorted(status.value for status in outcomes) == ["ALREADY_UNLOCKED", "UNLOCKED"]
    assert await available_balance(fan_id) == 0
    assert await available_balance(creator_id) == 500
    assert await count_unlocks(user_id=fan_id, post_id=post_id) == 1
    assert await count_transactions(user_id=fan_id, kind="PPV_DEBIT") == 1
    assert await count_transactions(user_id=creator_id, kind="CREATOR_EARNING") == 1


@pytest.mark.asyncio
async def test_many_duplicate_unlocks_have_single_winner() -> None:
    now_utc = datetime.now(UTC)
    creator_id = await create_profile(role="CREATOR")
    fan_id = await create_profile()
    post_id = await create_post(creator_id=creator_id, visibility="PPV", price_cents=500, now_utc=now_utc)
    await fund_wallet(user_id=fan_id, amount_cents=5_000, now_utc=now_utc)

    outcomes = await _parallel_unlocks(user_id=fan_id, post_id=post_id, attempts=5, now_utc=now_utc)

    assert outcomes.count(UnlockStatus.UNLOCKED) == 1
    assert outcomes.count(UnlockStatus.ALREADY_UNLOCKED) == 4
    assert await available_balance(fan_id) == 4_500
    assert await count_transactions(user_id=fan_id, kind="PPV_DEBIT") == 1


@pytest.mark.asyncio
async def test_mirrored_unlocks_between_two_creators_do_not_deadlock() -> None:
    now_utc = datetime.now(UTC)
    creator_a = await create_profile(role="CREATOR")
    creator_b = await create_profile(role="CREATOR")
    post_a = await create_post(creator_id=creator_a, visibility="PPV", price_cents=300, now_utc=now_utc)
    post_b = await create_post(creator_id=creator_b, visibility="PPV", price_cents=300, now_utc=now_utc)
    await fund_wallet(user_id=creator_a, amount_cents=1_000, now_utc=now_utc)
    await fund_wallet(user_id=creator_b, amount_cents=1_000, now_utc=now_utc)
    barrier = asyncio.Event()

    async def _attempt(user_id: UUID, post_id: UUID) -> UnlockStatus:
        await barrier.wait()
        async with SessionLocal.begin() as session:
            result = await UnlockService.unlock(
                session,
                user_id=user_id,
                post_id=post_id,
                price_cents=300,
                now_utc=now_utc,
            )
        return result.status

    tasks = [
        asyncio.create_task(_attempt(creator_a, post_b)),
        asyncio.create_task(_attempt(creator_b, post_a)),
    ]
    barrier.set()
    outcomes = await asyncio.wait_for(asyncio.gather(*tasks), timeout=10)

    assert outcomes == [UnlockStatus.UNLOCKED, UnlockStatus.UNLOCKED]
    assert await available_balance(creator_a) == 1_000
    assert await available_balance(creator_b) == 1_000


@pytest.mark.asyncio
async def test_mirrored_unfunded_unlocks_are_insufficient_without_deadlock() -> None:
    now_utc = datetime.now(UTC)
    creator_a = await create_profile(role="CREATOR")
    creator_b = await create_profile(role="CREATOR")
    post_a = await create_post(creator_id=creator_a, visibility="PPV", price_cents=500, now_utc=now_utc)
    post_b = await create_post(creator_id=creator_b, visibility="PPV", price_cents=500, now_utc=now_utc)

    async def _attempt(user_id: UUID, post_id: UUID, barrier: asyncio.Event) -> UnlockStatus:
        await barrier.wait()
        async with SessionLocal.begin() as session:
            result = await UnlockService.unlock(
                session,
                user_id=user_id,
                post_id=post_id,
                price_cents=500,
                now_utc=now_utc,
            )
        return result.status

    for _ in range(20):
        barrier = asyncio.Event()
        tasks = [
            asyncio.create_task(_attempt(creator_a, post_b, barrier)),
            asyncio.create_task(_attempt(creator_b, post_a, barrier)),
        ]
        barrier.set()
        outcomes = await asyncio.wait_for(asyncio.gather(*tasks), timeout=10)
        assert outcomes == [UnlockStatus.INSUFFICIENT_BALANCE, UnlockStatus.INSUFFICIENT_BALANCE]

    assert await count_wallets() == 0
