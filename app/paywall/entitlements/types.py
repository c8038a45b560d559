from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from uuid import UUID


class Visibility(str, Enum):
    FREE = "FREE"
    SUBSCRIBERS = "SUBSCRIBERS"
    PPV = "PPV"


@dataclass(frozen=True, slots=True)
class PostAccessView:
    post_id: UUID
    creator_id: UUID
    visibility: Visibility
    price_cents: int
    is_deleted: bool = False


@dataclass(frozen=True, slots=True)
class AccessDecision:
    found: bool
    can_view: bool


NOT_FOUND = AccessDecision(found=False, can_view=False)
