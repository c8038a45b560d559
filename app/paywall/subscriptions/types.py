from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(slots=True)
class SubscriptionView:
    subscriber_id: UUID
    creator_id: UUID
    status: str
    starts_at: datetime
    ends_at: datetime
    canceled_at: datetime | None
    is_active: bool
