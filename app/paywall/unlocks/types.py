from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from uuid import UUID


class UnlockStatus(str, Enum):
    ALREADY_UNLOCKED = "ALREADY_UNLOCKED"
    UNLOCKED = "UNLOCKED"
    INSUFFICIENT_BALANCE = "INSUFFICIENT_BALANCE"
    INVALID = "INVALID"


REASON_NOT_FOUND = "not_found"
REASON_NOT_PPV = "not_ppv"
REASON_PRICE_MISMATCH = "price_mismatch"


@dataclass(slots=True)
class UnlockResult:
    status: UnlockStatus
    post_id: UUID
    unlock_id: UUID | None = None
    price_cents: int | None = None
    balance_after_cents: int | None = None
    reason: str | None = None

    @property
    def is_entitled(self) -> bool:
        return self.status in (UnlockStatus.UNLOCKED, UnlockStatus.ALREADY_UNLOCKED)


@dataclass(slots=True)
class PurchaseView:
    unlock_id: UUID
    post_id: UUID
    creator_id: UUID
    price_cents: int
    created_at: datetime
