from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace
from uuid import UUID, uuid4

import pytest

from app.db.repo import wallet_repo
from app.paywall.ledger import service
from app.paywall.ledger.errors import (
    DepositLimitExceededError,
    InsufficientBalanceError,
    LedgerIdempotencyConflictError,
    LedgerValidationError,
)
from app.paywall.ledger.rules import (
    creator_earning_cents,
    platform_fee_cents,
    validate_transaction_amount,
)

UTC = timezone.utc
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


class _FakeNested:
    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        return False


class _FakeSession:
    def begin_nested(self):
        return _FakeNested()


@pytest.mark.parametrize(
    ("kind", "amount"),
    [("PPV_DEBIT", 500), ("DEPOSIT", -1), ("CREATOR_EARNING", -5), ("REFUND", 0), ("BONUS", 10)],
)
def test_validate_transaction_amount_rejects_bad_sign_or_kind(kind, amount) -> None:
    with pytest.raises(LedgerValidationError):
        validate_transaction_amount(kind=kind, amount_cents=amount)


def test_validate_transaction_amount_accepts_signed_kinds() -> None:
    validate_transaction_amount(kind="PPV_DEBIT", amount_cents=-500)
    validate_transaction_amount(kind="DEPOSIT", amount_cents=500)
    validate_transaction_amount(kind="CREATOR_EARNING", amount_cents=1)
    validate_transaction_amount(kind="REFUND", amount_cents=20)


def test_creator_earning_floors_the_platform_fee() -> None:
    assert creator_earning_cents(500, fee_bps=0) == 500
    assert platform_fee_cents(999, fee_bps=2_000) == 199
    assert creator_earning_cents(999, fee_bps=2_000) == 800
    assert creator_earning_cents(1, fee_bps=9_999) == 1


@pytest.mark.asyncio
async def test_apply_transaction_raises_and_writes_nothing_when_balance_is_short(monkeypatch) -> None:
    async def _fake_ensure(session, *, user_id, now_utc):
        return None

    async def _fake_delta(session, *, user_id, delta_cents, now_utc):
        return None

    async def _unexpected_create(*args, **kwargs):
        raise AssertionError("no transaction row expected")

    monkeypatch.setattr(service.WalletRepo, "ensure_account", _fake_ensure)
    monkeypatch.setattr(service.WalletRepo, "apply_available_delta", _fake_delta)
    monkeypatch.setattr(service.TransactionsRepo, "create", _unexpected_create)

    with pytest.raises(InsufficientBalanceError):
        await service.LedgerService.apply_transaction(
            object(),
            user_id=uuid4(),
            kind="PPV_DEBIT",
            amount_cents=-500,
            related_id=uuid4(),
            idempotency_key="ppv_debit:x",
            now_utc=NOW,
        )


@pytest.mark.asyncio
async def test_apply_transaction_records_balance_after(monkeypatch) -> None:
    user_id = uuid4()
    related_id = uuid4()
    created: list[object] = []

    async def _fake_ensure(session, *, user_id, now_utc):
        return None

    async def _fake_delta(session, *, user_id, delta_cents, now_utc):
        assert delta_cents == 700
        return 1_200

    async def _fake_create(session, *, transaction):
        created.append(transaction)
        return transaction

    monkeypatch.setattr(service.WalletRepo, "ensure_account", _fake_ensure)
    monkeypatch.setattr(service.WalletRepo, "apply_available_delta", _fake_delta)
    monkeypatch.setattr(service.TransactionsRepo, "create", _fake_create)

    transaction_id = await service.LedgerService.apply_transaction(
        object(),
        user_id=user_id,
        kind="CREATOR_EARNING",
        amount_cents=700,
        related_id=related_id,
        idempotency_key="creator_earning:x",
        now_utc=NOW,
    )

    [row] = created
    assert row.id == transaction_id
    assert row.status == "COMPLETED"
    assert row.balance_after_cents == 1_200
    assert row.related_id == related_id


@pytest.mark.asyncio
async def test_get_balance_is_zero_without_wallet(monkeypatch) -> None:
    async def _fake_get(session, user_id):
        return None

    monkeypatch.setattr(service.WalletRepo, "get_by_user_id", _fake_get)

    balance = await service.LedgerService.get_balance(object(), user_id=uuid4())
    assert (balance.available, balance.pending) == (0, 0)


@pytest.mark.asyncio
async def test_deposit_replays_existing_key(monkeypatch) -> None:
    user_id = uuid4()
    existing = SimpleNamespace(id=uuid4(), user_id=user_id, amount_cents=1_000, balance_after_cents=1_000)

    async def _fake_get_by_key(session, idempotency_key):
        assert idempotency_key == "deposit:client-1"
        return existing

    monkeypatch.setattr(service.TransactionsRepo, "get_by_idempotency_key", _fake_get_by_key)

    result = await service.LedgerService.deposit(
        _FakeSession(),
        user_id=user_id,
        amount_cents=1_000,
        idempotency_key="client-1",
        now_utc=NOW,
    )
    assert result.idempotent_replay is True
    assert result.transaction_id == existing.id

    with pytest.raises(LedgerIdempotencyConflictError):
        await service.LedgerService.deposit(
            _FakeSession(),
            user_id=user_id,
            amount_cents=2_000,
            idempotency_key="client-1",
            now_utc=NOW,
        )


@pytest.mark.asyncio
async def test_deposit_enforces_limit(monkeypatch) -> None:
    async def _fake_get_by_key(session, idempotency_key):
        return None

    monkeypatch.setattr(service.TransactionsRepo, "get_by_idempotency_key", _fake_get_by_key)
    monkeypatch.setattr(service, "get_settings", lambda: SimpleNamespace(wallet_max_deposit_cents=5_000))

    with pytest.raises(DepositLimitExceededError):
        await service.LedgerService.deposit(
            _FakeSession(),
            user_id=uuid4(),
            amount_cents=5_001,
            idempotency_key="client-2",
            now_utc=NOW,
        )


@pytest.mark.asyncio
async def test_ensure_accounts_inserts_in_lock_order(monkeypatch) -> None:
    low = UUID("00000000-0000-0000-0000-00000000000a")
    high = UUID("ffffffff-0000-0000-0000-000000000001")
    inserted: list[UUID] = []

    async def _fake_ensure(session, *, user_id, now_utc):
        inserted.append(user_id)

    monkeypatch.setattr(wallet_repo.WalletRepo, "ensure_account", _fake_ensure)

    await wallet_repo.WalletRepo.ensure_accounts(object(), [high, low, high], now_utc=NOW)

    assert inserted == [low, high] == wallet_repo.lock_order([high, low])
