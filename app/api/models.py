from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class AccessResponse(CamelModel):
    can_view: bool
    found: bool


class PostCreateRequest(CamelModel):
    title: str | None = Field(default=None, max_length=200)
    body: str = Field(default="", max_length=20_000)
    visibility: str = Field(min_length=1, max_length=16)
    price_cents: int = Field(default=0, ge=0)


class PostUpdateRequest(CamelModel):
    title: str | None = Field(default=None, max_length=200)
    body: str | None = Field(default=None, max_length=20_000)


class PostResponse(CamelModel):
    id: UUID
    creator_id: UUID
    title: str | None = None
    body: str | None = None
    visibility: str
    price_cents: int
    is_deleted: bool
    created_at: datetime
    can_view: bool = True


class PostListResponse(CamelModel):
    posts: list[PostResponse]


class SubscriptionResponse(CamelModel):
    subscriber_id: UUID
    creator_id: UUID
    status: str
    starts_at: datetime
    ends_at: datetime
    canceled_at: datetime | None = None
    is_active: bool


class SubscribeResponse(CamelModel):
    success: bool
    subscription: SubscriptionResponse | None = None


class SuccessResponse(CamelModel):
    success: bool


class SubscriptionStatusResponse(CamelModel):
    is_subscribed: bool


class SubscribersResponse(CamelModel):
    subscribers: list[SubscriptionResponse]
    active_count: int = Field(ge=0)


class UnlockRequest(CamelModel):
    post_id: UUID
    price_cents: int = Field(gt=0)


class UnlockResponse(CamelModel):
    success: bool
    status: str
    error: str | None = None
    unlock_id: UUID | None = None
    balance_after_cents: int | None = None


class WalletBalanceResponse(CamelModel):
    available: int
    pending: int


class DepositRequest(CamelModel):
    amount_cents: int = Field(gt=0)
    idempotency_key: str = Field(min_length=1, max_length=96)


class DepositResponse(CamelModel):
    transaction_id: UUID
    amount_cents: int
    balance_after_cents: int | None = None
    idempotent_replay: bool


class TransactionResponse(CamelModel):
    id: UUID
    kind: str
    amount_cents: int
    status: str
    related_id: UUID | None = None
    balance_after_cents: int | None = None
    created_at: datetime


class TransactionListResponse(CamelModel):
    transactions: list[TransactionResponse]


class PurchaseResponse(CamelModel):
    unlock_id: UUID
    post_id: UUID
    creator_id: UUID
    price_cents: int
    created_at: datetime


class PurchaseListResponse(CamelModel):
    purchases: list[PurchaseResponse]


class EarningsResponse(CamelModel):
    total_cents: int
    unlock_count: int = Field(ge=0)
    transactions: list[TransactionResponse]


class LedgerAuditResponse(CamelModel):
    started_at: datetime
    finished_at: datetime
    status: str
    diff_count: int = Field(ge=0)
    details: dict[str, object]
