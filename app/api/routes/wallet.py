from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import require_user_id
from app.api.models import (
    DepositRequest,
    DepositResponse,
    EarningsResponse,
    TransactionListResponse,
    TransactionResponse,
    WalletBalanceResponse,
)
from app.db.session import SessionLocal
from app.paywall.ledger.constants import KIND_CREATOR_EARNING
from app.paywall.ledger.errors import (
    DepositLimitExceededError,
    LedgerIdempotencyConflictError,
    LedgerValidationError,
)
from app.paywall.ledger.service import LedgerService
from app.paywall.ledger.types import TransactionView

router = APIRouter(tags=["wallet"])


def _as_transaction_response(view: TransactionView) -> TransactionResponse:
    return TransactionResponse(
        id=view.id,
        kind=view.kind,
        amount_cents=view.amount_cents,
        status=view.status,
        related_id=view.related_id,
        balance_after_cents=view.balance_after_cents,
        created_at=view.created_at,
    )


@router.get("/api/wallet/balance", response_model=WalletBalanceResponse)
async def wallet_balance(user_id: UUID = Depends(require_user_id)) -> WalletBalanceResponse:
    async with SessionLocal.begin() as session:
        balance = await LedgerService.get_balance(session, user_id=user_id)
    return WalletBalanceResponse(available=balance.available, pending=balance.pending)


@router.post("/api/wallet/deposit", response_model=DepositResponse)
async def deposit(
    payload: DepositRequest,
    user_id: UUID = Depends(require_user_id),
) -> DepositResponse:
    try:
        async with SessionLocal.begin() as session:
            result = await LedgerService.deposit(
                session,
                user_id=user_id,
                amount_cents=payload.amount_cents,
                idempotency_key=payload.idempotency_key,
                now_utc=datetime.now(timezone.utc),
            )
    except DepositLimitExceededError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_DEPOSIT_LIMIT_EXCEEDED"}) from exc
    except LedgerValidationError as exc:
        raise HTTPException(status_code=422, detail={"code": "E_DEPOSIT_INVALID"}) from exc
    except LedgerIdempotencyConflictError as exc:
        raise HTTPException(status_code=409, detail={"code": "E_IDEMPOTENCY_CONFLICT"}) from exc

    return DepositResponse(
        transaction_id=result.transaction_id,
        amount_cents=result.amount_cents,
        balance_after_cents=result.balance_after_cents,
        idempotent_replay=result.idempotent_replay,
    )


@router.get("/api/transactions", response_model=TransactionListResponse)
async def list_transactions(
    limit: int = Query(default=50, ge=1, le=100),
    user_id: UUID = Depends(require_user_id),
) -> TransactionListResponse:
    async with SessionLocal.begin() as session:
        views = await LedgerService.list_transactions(session, user_id=user_id, limit=limit)
    return TransactionListResponse(transactions=[_as_transaction_response(view) for view in views])


@router.get("/api/paywall/earnings", response_model=EarningsResponse)
async def creator_earnings(
    limit: int = Query(default=100, ge=1, le=500),
    user_id: UUID = Depends(require_user_id),
) -> EarningsResponse:
    async with SessionLocal.begin() as session:
        views = await LedgerService.list_transactions(
            session,
            user_id=user_id,
            kinds=(KIND_CREATOR_EARNING,),
            limit=limit,
        )
    return EarningsResponse(
        total_cents=sum(view.amount_cents for view in views),
        unlock_count=len(views),
        transactions=[_as_transaction_response(view) for view in views],
    )
