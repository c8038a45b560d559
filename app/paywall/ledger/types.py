from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class WalletBalance:
    available: int
    pending: int


@dataclass(slots=True)
class DepositResult:
    transaction_id: UUID
    amount_cents: int
    balance_after_cents: int | None
    idempotent_replay: bool


@dataclass(slots=True)
class TransactionView:
    id: UUID
    kind: str
    amount_cents: int
    status: str
    related_id: UUID | None
    balance_after_cents: int | None
    metadata: dict[str, object]
    created_at: datetime
