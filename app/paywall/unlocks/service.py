from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.unlocks import Unlock
from app.db.repo.posts_repo import PostsRepo
from app.db.repo.profiles_repo import ProfilesRepo
from app.db.repo.unlocks_repo import UnlocksRepo
from app.db.repo.wallet_repo import WalletRepo
from app.paywall.entitlements.access import is_creator_hidden
from app.paywall.entitlements.service import EntitlementService, as_access_view
from app.paywall.entitlements.types import Visibility
from app.paywall.ledger.constants import KIND_CREATOR_EARNING, KIND_PPV_DEBIT
from app.paywall.ledger.errors import InsufficientBalanceError
from app.paywall.ledger.rules import creator_earning_cents
from app.paywall.ledger.service import LedgerService
from app.paywall.unlocks.types import (
    REASON_NOT_FOUND,
    REASON_NOT_PPV,
    REASON_PRICE_MISMATCH,
    PurchaseView,
    UnlockResult,
    UnlockStatus,
)

logger = structlog.get_logger(__name__)


def _invalid(post_id: UUID, reason: str) -> UnlockResult:
    logger.info("ppv_unlock_invalid", post_id=str(post_id), reason=reason)
    return UnlockResult(status=UnlockStatus.INVALID, post_id=post_id, reason=reason)


def _already_unlocked(unlock: Unlock | None, *, post_id: UUID, user_id: UUID) -> UnlockResult:
    logger.info("ppv_unlock_already_unlocked", post_id=str(post_id), user_id=str(user_id))
    return UnlockResult(
        status=UnlockStatus.ALREADY_UNLOCKED,
        post_id=post_id,
        unlock_id=unlock.id if unlock is not None else None,
        price_cents=unlock.price_cents if unlock is not None else None,
    )


def _insufficient_balance(*, post_id: UUID, user_id: UUID, price_cents: int) -> UnlockResult:
    logger.info(
        "ppv_unlock_insufficient_balance",
        post_id=str(post_id),
        user_id=str(user_id),
        price_cents=price_cents,
    )
    return UnlockResult(
        status=UnlockStatus.INSUFFICIENT_BALANCE,
        post_id=post_id,
        price_cents=price_cents,
    )


class UnlockService:
    @staticmethod
    async def unlock(
        session: AsyncSession,
        *,
        user_id: UUID,
        post_id: UUID,
        price_cents: int,
        now_utc: datetime,
        visitor_country: str | None = None,
    ) -> UnlockResult:
        """Buy permanent access to a PPV post.

        Runs inside the caller's transaction. The fan debit, the creator
        credit and the unlock row are written under one savepoint: either all
        three land or none do. Concurrent duplicates are serialized by the
        unique (user_id, post_id) constraint and resolve to ALREADY_UNLOCKED.
        """
        post = await PostsRepo.get_by_id(session, post_id)
        if post is None or post.is_deleted:
            return _invalid(post_id, REASON_NOT_FOUND)

        creator = await ProfilesRepo.get_by_id(session, post.creator_id)
        if is_creator_hidden(creator, viewer_id=user_id, visitor_country=visitor_country):
            return _invalid(post_id, REASON_NOT_FOUND)
        if post.visibility != Visibility.PPV.value:
            return _invalid(post_id, REASON_NOT_PPV)
        if price_cents != post.price_cents:
            return _invalid(post_id, REASON_PRICE_MISMATCH)

        already_entitled = await EntitlementService.can_view(
            session,
            viewer_id=user_id,
            post=as_access_view(post),
            now_utc=now_utc,
        )
        if already_entitled:
            existing = await UnlocksRepo.get_by_user_post(session, user_id=user_id, post_id=post_id)
            return _already_unlocked(existing, post_id=post_id, user_id=user_id)

        # Read-only precheck: an unfunded fan gets no wallet rows and takes no locks.
        wallet = await WalletRepo.get_by_user_id(session, user_id)
        if wallet is None or wallet.available_balance_cents < post.price_cents:
            # A concurrent duplicate may have committed its debit after the entitlement read.
            existing = await UnlocksRepo.get_by_user_post(session, user_id=user_id, post_id=post_id)
            if existing is not None:
                return _already_unlocked(existing, post_id=post_id, user_id=user_id)
            return _insufficient_balance(post_id=post_id, user_id=user_id, price_cents=post.price_cents)

        earning_cents = creator_earning_cents(
            post.price_cents,
            fee_bps=get_settings().platform_fee_bps,
        )
        unlock_id = uuid4()
        try:
            async with session.begin_nested():
                await WalletRepo.ensure_accounts(session, [user_id, post.creator_id], now_utc=now_utc)
                await WalletRepo.lock_accounts(session, [user_id, post.creator_id])
                unlock = await UnlocksRepo.create(
                    session,
                    unlock=Unlock(
                        id=unlock_id,
                        user_id=user_id,
                        post_id=post.id,
                        creator_id=post.creator_id,
                        price_cents=post.price_cents,
                        created_at=now_utc,
                    ),
                )
                debit = await LedgerService.record_transaction(
                    session,
                    user_id=user_id,
                    kind=KIND_PPV_DEBIT,
                    amount_cents=-post.price_cents,
                    related_id=unlock.id,
                    idempotency_key=f"ppv_debit:{unlock.id}",
                    now_utc=now_utc,
                    metadata={"post_id": str(post.id), "creator_id": str(post.creator_id)},
                )
                await LedgerService.record_transaction(
                    session,
                    user_id=post.creator_id,
                    kind=KIND_CREATOR_EARNING,
                    amount_cents=earning_cents,
                    related_id=unlock.id,
                    idempotency_key=f"creator_earning:{unlock.id}",
                    now_utc=now_utc,
                    metadata={
                        "post_id": str(post.id),
                        "fan_id": str(user_id),
                        "gross_cents": post.price_cents,
                    },
                )
        except IntegrityError:
            existing = await UnlocksRepo.get_by_user_post(session, user_id=user_id, post_id=post_id)
            if existing is None:
                raise
            return _already_unlocked(existing, post_id=post_id, user_id=user_id)
        except InsufficientBalanceError:
            return _insufficient_balance(post_id=post_id, user_id=user_id, price_cents=post.price_cents)

        logger.info(
            "ppv_unlock_completed",
            post_id=str(post_id),
            user_id=str(user_id),
            unlock_id=str(unlock.id),
            price_cents=post.price_cents,
            creator_earning_cents=earning_cents,
        )
        return UnlockResult(
            status=UnlockStatus.UNLOCKED,
            post_id=post_id,
            unlock_id=unlock.id,
            price_cents=post.price_cents,
            balance_after_cents=debit.balance_after_cents,
        )

    @staticmethod
    async def list_purchases(
        session: AsyncSession,
        *,
        user_id: UUID,
        limit: int = 50,
    ) -> list[PurchaseView]:
        unlocks = await UnlocksRepo.list_by_user(session, user_id=user_id, limit=limit)
        return [
            PurchaseView(
                unlock_id=item.id,
                post_id=item.post_id,
                creator_id=item.creator_id,
                price_cents=item.price_cents,
                created_at=item.created_at,
            )
            for item in unlocks
        ]
