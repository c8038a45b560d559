from __future__ import annotations

from app.paywall.ledger.constants import BPS_DENOMINATOR, CREDIT_KINDS, DEBIT_KINDS
from app.paywall.ledger.errors import LedgerValidationError


def validate_transaction_amount(*, kind: str, amount_cents: int) -> None:
    if amount_cents == 0:
        raise LedgerValidationError("amount must be non-zero")
    if kind in DEBIT_KINDS:
        if amount_cents > 0:
            raise LedgerValidationError(f"{kind} amount must be negative")
        return
    if kind in CREDIT_KINDS:
        if amount_cents < 0:
            raise LedgerValidationError(f"{kind} amount must be positive")
        return
    raise LedgerValidationError(f"unknown transaction kind: {kind}")


def platform_fee_cents(price_cents: int, *, fee_bps: int) -> int:
    return price_cents * fee_bps // BPS_DENOMINATOR


def creator_earning_cents(price_cents: int, *, fee_bps: int) -> int:
    return price_cents - platform_fee_cents(price_cents, fee_bps=fee_bps)
