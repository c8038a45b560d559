from __future__ import annotations

from datetime import datetime
from uuid import UUID

from sqlalchemy import BigInteger, CheckConstraint, DateTime, ForeignKey, Index, String, UniqueConstraint, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.dialects.postgresql import UUID as PG_UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.models.base import Base


class Transaction(Base):
    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint(
            "kind IN ('DEPOSIT','PPV_DEBIT','CREATOR_EARNING','REFUND')",
            name="ck_transactions_kind",
        ),
        CheckConstraint("status IN ('PENDING','COMPLETED','FAILED')", name="ck_transactions_status"),
        CheckConstraint("amount_cents <> 0", name="ck_transactions_amount_non_zero"),
        CheckConstraint(
            "(kind = 'PPV_DEBIT' AND amount_cents < 0) OR (kind <> 'PPV_DEBIT' AND amount_cents > 0)",
            name="ck_transactions_amount_sign",
        ),
        UniqueConstraint("idempotency_key", name="uq_transactions_idempotency_key"),
        Index("idx_transactions_user_created", "user_id", "created_at"),
        Index("idx_transactions_related", "related_id"),
        Index("idx_transactions_kind_status", "kind", "status"),
    )

    id: Mapped[UUID] = mapped_column(PG_UUID(as_uuid=True), primary_key=True)
    user_id: Mapped[UUID] = mapped_column(
        PG_UUID(as_uuid=True),
        ForeignKey("wallet_accounts.user_id"),
        nullable=False,
    )
    kind: Mapped[str] = mapped_column(String(32), nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    status: Mapped[str] = mapped_column(String(16), nullable=False)
    related_id: Mapped[UUID | None] = mapped_column(PG_UUID(as_uuid=True), nullable=True)
    balance_after_cents: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    idempotency_key: Mapped[str] = mapped_column(String(128), nullable=False)
    metadata_: Mapped[dict[str, object]] = mapped_column(
        "metadata",
        JSONB,
        nullable=False,
        server_default=text("'{}'::jsonb"),
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
