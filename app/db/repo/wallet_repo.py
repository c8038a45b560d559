from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime
from uuid import UUID

from sqlalchemy import select, update
from sqlalchemy.dialects.postgresql import insert
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.wallet_accounts import WalletAccount


def lock_order(user_ids: Sequence[UUID]) -> list[UUID]:
    return sorted(set(user_ids), key=str)


class WalletRepo:
    @staticmethod
    async def get_by_user_id(session: AsyncSession, user_id: UUID) -> WalletAccount | None:
        stmt = (
            select(WalletAccount)
            .where(WalletAccount.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def ensure_account(session: AsyncSession, *, user_id: UUID, now_utc: datetime) -> None:
        # Losing the insert race to a concurrent request is success: the row exists either way.
        stmt = (
            insert(WalletAccount)
            .values(
                user_id=user_id,
                available_balance_cents=0,
                pending_balance_cents=0,
                created_at=now_utc,
                updated_at=now_utc,
            )
            .on_conflict_do_nothing(index_elements=[WalletAccount.user_id])
        )
        await session.execute(stmt)

    @staticmethod
    async def ensure_accounts(session: AsyncSession, user_ids: Sequence[UUID], *, now_utc: datetime) -> None:
        for user_id in lock_order(user_ids):
            await WalletRepo.ensure_account(session, user_id=user_id, now_utc=now_utc)

    @staticmethod
    async def lock_accounts(session: AsyncSession, user_ids: Sequence[UUID]) -> list[WalletAccount]:
        ordered_ids = lock_order(user_ids)
        if not ordered_ids:
            return []
        stmt = (
            select(WalletAccount)
            .where(WalletAccount.user_id.in_(ordered_ids))
            .order_by(WalletAccount.user_id)
            .with_for_update()
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def apply_available_delta(
        session: AsyncSession,
        *,
        user_id: UUID,
        delta_cents: int,
        now_utc: datetime,
    ) -> int | None:
        """Atomically add ``delta_cents`` unless the result would go negative.

        Returns the new available balance, or None when no row matched
        (missing wallet or insufficient funds).
        """
        new_balance = WalletAccount.available_balance_cents + delta_cents
        stmt = (
            update(WalletAccount)
            .where(
                WalletAccount.user_id == user_id,
                new_balance >= 0,
            )
            .values(available_balance_cents=new_balance, updated_at=now_utc)
            .returning(WalletAccount.available_balance_cents)
            .execution_options(synchronize_session=False)
        )
        result = await session.execute(stmt)
        balance = result.scalar_one_or_none()
        return int(balance) if balance is not None else None

    @staticmethod
    async def list_negative_balances(session: AsyncSession, *, limit: int = 100) -> list[UUID]:
        stmt = (
            select(WalletAccount.user_id)
            .where(WalletAccount.available_balance_cents < 0)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
