from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from uuid import UUID


@dataclass(frozen=True, slots=True)
class BalanceMismatch:
    user_id: UUID
    available_balance_cents: int
    ledger_total_cents: int


@dataclass(slots=True)
class LedgerAuditReport:
    started_at: datetime
    finished_at: datetime
    status: str
    diff_count: int
    negative_balance_user_ids: list[UUID] = field(default_factory=list)
    balance_mismatches: list[BalanceMismatch] = field(default_factory=list)
    unpaired_unlock_ids: list[UUID] = field(default_factory=list)
    stale_pending_transaction_ids: list[UUID] = field(default_factory=list)

    def as_details(self) -> dict[str, object]:
        return {
            "negative_balance_user_ids": [str(item) for item in self.negative_balance_user_ids],
            "balance_mismatches": [
                {
                    "user_id": str(item.user_id),
                    "available_balance_cents": item.available_balance_cents,
                    "ledger_total_cents": item.ledger_total_cents,
                }
                for item in self.balance_mismatches
            ],
            "unpaired_unlock_ids": [str(item) for item in self.unpaired_unlock_ids],
            "stale_pending_transaction_ids": [
                str(item) for item in self.stale_pending_transaction_ids
            ],
        }
