from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.transactions import Transaction
from app.db.models.unlocks import Unlock
from app.db.models.wallet_accounts import WalletAccount


class TransactionsRepo:
    @staticmethod
    async def get_by_idempotency_key(
        session: AsyncSession,
        idempotency_key: str,
    ) -> Transaction | None:
        stmt = select(Transaction).where(Transaction.idempotency_key == idempotency_key)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()

    @staticmethod
    async def create(session: AsyncSession, *, transaction: Transaction) -> Transaction:
        session.add(transaction)
        await session.flush()
        return transaction

    @staticmethod
    async def list_by_related_id(session: AsyncSession, related_id: UUID) -> list[Transaction]:
        stmt = (
            select(Transaction)
            .where(Transaction.related_id == related_id)
            .order_by(Transaction.created_at.asc(), Transaction.kind.asc())
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_by_user(
        session: AsyncSession,
        *,
        user_id: UUID,
        kinds: tuple[str, ...] | None = None,
        limit: int = 50,
    ) -> list[Transaction]:
        stmt = select(Transaction).where(Transaction.user_id == user_id)
        if kinds:
            stmt = stmt.where(Transaction.kind.in_(kinds))
        stmt = stmt.order_by(Transaction.created_at.desc()).limit(limit)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_balance_mismatches(
        session: AsyncSession,
        *,
        limit: int = 100,
    ) -> list[tuple[UUID, int, int]]:
        completed_totals = (
            select(
                Transaction.user_id.label("user_id"),
                func.coalesce(func.sum(Transaction.amount_cents), 0).label("total"),
            )
            .where(Transaction.status == "COMPLETED")
            .group_by(Transaction.user_id)
            .subquery()
        )
        ledger_total = func.coalesce(completed_totals.c.total, 0)
        stmt = (
            select(
                WalletAccount.user_id,
                WalletAccount.available_balance_cents,
                ledger_total,
            )
            .select_from(WalletAccount)
            .outerjoin(completed_totals, completed_totals.c.user_id == WalletAccount.user_id)
            .where(WalletAccount.available_balance_cents != ledger_total)
            .limit(limit)
        )
        result = await session.execute(stmt)
        return [(user_id, int(balance), int(total)) for user_id, balance, total in result.all()]

    @staticmethod
    async def list_unpaired_unlock_ids(session: AsyncSession, *, limit: int = 100) -> list[UUID]:
        """Unlocks lacking exactly one matching fan debit and one creator earning."""
        debit_counts = (
            select(
                Transaction.related_id.label("unlock_id"),
                func.count(Transaction.id).label("debits"),
            )
            .select_from(Transaction)
            .join(Unlock, Unlock.id == Transaction.related_id)
            .where(
                Transaction.kind == "PPV_DEBIT",
                Transaction.user_id == Unlock.user_id,
                Transaction.amount_cents == -Unlock.price_cents,
            )
            .group_by(Transaction.related_id)
            .subquery()
        )
        earning_counts = (
            select(
                Transaction.related_id.label("unlock_id"),
                func.count(Transaction.id).label("earnings"),
            )
            .select_from(Transaction)
            .join(Unlock, Unlock.id == Transaction.related_id)
            .where(
                Transaction.kind == "CREATOR_EARNING",
                Transaction.user_id == Unlock.creator_id,
            )
            .group_by(Transaction.related_id)
            .subquery()
        )
        stmt = (
            select(Unlock.id)
            .outerjoin(debit_counts, debit_counts.c.unlock_id == Unlock.id)
            .outerjoin(earning_counts, earning_counts.c.unlock_id == Unlock.id)
            .where(
                or_(
                    func.coalesce(debit_counts.c.debits, 0) != 1,
                    func.coalesce(earning_counts.c.earnings, 0) != 1,
                )
            )
            .order_by(Unlock.created_at.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())

    @staticmethod
    async def list_stale_pending_ids(
        session: AsyncSession,
        *,
        older_than_utc: datetime,
        limit: int = 100,
    ) -> list[UUID]:
        stmt = (
            select(Transaction.id)
            .where(
                Transaction.status == "PENDING",
                Transaction.created_at < older_than_utc,
            )
            .order_by(Transaction.created_at.asc())
            .limit(limit)
        )
        result = await session.execute(stmt)
        return list(result.scalars().all())
