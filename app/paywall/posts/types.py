from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from uuid import UUID


@dataclass(slots=True)
class PostListItem:
    post_id: UUID
    creator_id: UUID
    title: str | None
    body: str | None
    visibility: str
    price_cents: int
    is_deleted: bool
    created_at: datetime
    can_view: bool
