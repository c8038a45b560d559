from __future__ import annotations

from datetime import datetime
from uuid import UUID, uuid4

import structlog
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.transactions import Transaction
from app.db.repo.transactions_repo import TransactionsRepo
from app.db.repo.wallet_repo import WalletRepo
from app.paywall.ledger.constants import KIND_DEPOSIT, STATUS_COMPLETED
from app.paywall.ledger.errors import (
    DepositLimitExceededError,
    InsufficientBalanceError,
    LedgerIdempotencyConflictError,
    LedgerValidationError,
)
from app.paywall.ledger.rules import validate_transaction_amount
from app.paywall.ledger.types import DepositResult, TransactionView, WalletBalance

logger = structlog.get_logger(__name__)


def as_transaction_view(transaction: Transaction) -> TransactionView:
    return TransactionView(
        id=transaction.id,
        kind=transaction.kind,
        amount_cents=transaction.amount_cents,
        status=transaction.status,
        related_id=transaction.related_id,
        balance_after_cents=transaction.balance_after_cents,
        metadata=dict(transaction.metadata_ or {}),
        created_at=transaction.created_at,
    )


class LedgerService:
    @staticmethod
    async def record_transaction(
        session: AsyncSession,
        *,
        user_id: UUID,
        kind: str,
        amount_cents: int,
        related_id: UUID | None,
        idempotency_key: str,
        now_utc: datetime,
        metadata: dict[str, object] | None = None,
    ) -> Transaction:
        """Mutate the wallet and append its audit row in the caller's transaction.

        The balance check and the write are one conditional UPDATE, so a debit
        that would overdraw the wallet matches no row and raises
        InsufficientBalanceError before anything is written.
        """
        validate_transaction_amount(kind=kind, amount_cents=amount_cents)

        await WalletRepo.ensure_account(session, user_id=user_id, now_utc=now_utc)
        balance_after = await WalletRepo.apply_available_delta(
            session,
            user_id=user_id,
            delta_cents=amount_cents,
            now_utc=now_utc,
        )
        if balance_after is None:
            raise InsufficientBalanceError

        return await TransactionsRepo.create(
            session,
            transaction=Transaction(
                id=uuid4(),
                user_id=user_id,
                kind=kind,
                amount_cents=amount_cents,
                status=STATUS_COMPLETED,
                related_id=related_id,
                balance_after_cents=balance_after,
                idempotency_key=idempotency_key,
                metadata_=metadata or {},
                created_at=now_utc,
            ),
        )

    @staticmethod
    async def apply_transaction(
        session: AsyncSession,
        *,
        user_id: UUID,
        kind: str,
        amount_cents: int,
        related_id: UUID | None,
        idempotency_key: str,
        now_utc: datetime,
        metadata: dict[str, object] | None = None,
    ) -> UUID:
        transaction = await LedgerService.record_transaction(
            session,
            user_id=user_id,
            kind=kind,
            amount_cents=amount_cents,
            related_id=related_id,
            idempotency_key=idempotency_key,
            now_utc=now_utc,
            metadata=metadata,
        )
        return transaction.id

    @staticmethod
    async def get_balance(session: AsyncSession, *, user_id: UUID) -> WalletBalance:
        account = await WalletRepo.get_by_user_id(session, user_id)
        if account is None:
            return WalletBalance(available=0, pending=0)
        return WalletBalance(
            available=account.available_balance_cents,
            pending=account.pending_balance_cents,
        )

    @staticmethod
    async def deposit(
        session: AsyncSession,
        *,
        user_id: UUID,
        amount_cents: int,
        idempotency_key: str,
        now_utc: datetime,
    ) -> DepositResult:
        ledger_key = f"deposit:{idempotency_key}"
        existing = await TransactionsRepo.get_by_idempotency_key(session, ledger_key)
        if existing is not None:
            return _as_deposit_replay(existing, user_id=user_id, amount_cents=amount_cents)

        if amount_cents <= 0:
            raise LedgerValidationError("deposit amount must be positive")
        if amount_cents > get_settings().wallet_max_deposit_cents:
            raise DepositLimitExceededError

        try:
            async with session.begin_nested():
                transaction = await LedgerService.record_transaction(
                    session,
                    user_id=user_id,
                    kind=KIND_DEPOSIT,
                    amount_cents=amount_cents,
                    related_id=None,
                    idempotency_key=ledger_key,
                    now_utc=now_utc,
                    metadata={"payment_method": "preauthorized"},
                )
        except IntegrityError:
            existing = await TransactionsRepo.get_by_idempotency_key(session, ledger_key)
            if existing is None:
                raise
            return _as_deposit_replay(existing, user_id=user_id, amount_cents=amount_cents)

        logger.info(
            "wallet_deposit_completed",
            user_id=str(user_id),
            amount_cents=amount_cents,
            balance_after_cents=transaction.balance_after_cents,
        )
        return DepositResult(
            transaction_id=transaction.id,
            amount_cents=amount_cents,
            balance_after_cents=transaction.balance_after_cents,
            idempotent_replay=False,
        )

    @staticmethod
    async def list_transactions(
        session: AsyncSession,
        *,
        user_id: UUID,
        kinds: tuple[str, ...] | None = None,
        limit: int = 50,
    ) -> list[TransactionView]:
        transactions = await TransactionsRepo.list_by_user(
            session,
            user_id=user_id,
            kinds=kinds,
            limit=limit,
        )
        return [as_transaction_view(item) for item in transactions]


def _as_deposit_replay(existing: Transaction, *, user_id: UUID, amount_cents: int) -> DepositResult:
    if existing.user_id != user_id or existing.amount_cents != amount_cents:
        raise LedgerIdempotencyConflictError
    return DepositResult(
        transaction_id=existing.id,
        amount_cents=existing.amount_cents,
        balance_after_cents=existing.balance_after_cents,
        idempotent_replay=True,
    )
