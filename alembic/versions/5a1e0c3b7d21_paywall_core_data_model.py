"""paywall_core_data_model

Revision ID: 5a1e0c3b7d21
Revises:
Create Date: 2026-10-19 09:00:00.000000
"""
from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

revision: str = "5a1e0c3b7d21"
down_revision: str | None = None
branch_labels: Sequence[str] | None = None
depends_on: Sequence[str] | None = None

APPEND_ONLY_TABLES = ("transactions", "unlocks")


def upgrade() -> None:
    op.create_table(
        "profiles",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("role", sa.String(16), nullable=False, server_default=sa.text("'FAN'")),
        sa.Column("display_name", sa.Text(), nullable=True),
        sa.Column("is_banned", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column(
            "blocked_countries",
            postgresql.ARRAY(sa.String(2)),
            nullable=False,
            server_default=sa.text("'{}'::varchar[]"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.CheckConstraint("role IN ('FAN','CREATOR','ADMIN')", name="ck_profiles_role"),
    )
    op.create_index("idx_profiles_role", "profiles", ["role"])

    op.create_table(
        "posts",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("creator_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(200), nullable=True),
        sa.Column("body", sa.Text(), nullable=False, server_default=sa.text("''")),
        sa.Column("visibility", sa.String(16), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("is_deleted", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("visibility IN ('FREE','SUBSCRIBERS','PPV')", name="ck_posts_visibility"),
        sa.CheckConstraint("price_cents >= 0", name="ck_posts_price_non_negative"),
        sa.CheckConstraint("visibility <> 'PPV' OR price_cents > 0", name="ck_posts_ppv_price_positive"),
        sa.CheckConstraint("visibility <> 'FREE' OR price_cents = 0", name="ck_posts_free_price_zero"),
        sa.ForeignKeyConstraint(["creator_id"], ["profiles.id"]),
    )
    op.create_index("idx_posts_creator_created", "posts", ["creator_id", "created_at"])

    op.create_table(
        "subscriptions",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("subscriber_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("creator_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("starts_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("ends_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("canceled_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("status IN ('ACTIVE','CANCELED')", name="ck_subscriptions_status"),
        sa.CheckConstraint("ends_at > starts_at", name="ck_subscriptions_term_positive"),
        sa.CheckConstraint("subscriber_id <> creator_id", name="ck_subscriptions_not_self"),
        sa.ForeignKeyConstraint(["subscriber_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["creator_id"], ["profiles.id"]),
        sa.UniqueConstraint("subscriber_id", "creator_id", name="uq_subscriptions_subscriber_creator"),
    )
    op.create_index("idx_subscriptions_creator_created", "subscriptions", ["creator_id", "created_at"])

    op.create_table(
        "unlocks",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("post_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("creator_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("price_cents", sa.Integer(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint("price_cents > 0", name="ck_unlocks_price_positive"),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.ForeignKeyConstraint(["post_id"], ["posts.id"]),
        sa.ForeignKeyConstraint(["creator_id"], ["profiles.id"]),
        sa.UniqueConstraint("user_id", "post_id", name="uq_unlocks_user_post"),
    )
    op.create_index("idx_unlocks_user_created", "unlocks", ["user_id", "created_at"])
    op.create_index("idx_unlocks_creator_created", "unlocks", ["creator_id", "created_at"])

    op.create_table(
        "wallet_accounts",
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("available_balance_cents", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column("pending_balance_cents", sa.BigInteger(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "available_balance_cents >= 0",
            name="ck_wallet_accounts_available_non_negative",
        ),
        sa.CheckConstraint(
            "pending_balance_cents >= 0",
            name="ck_wallet_accounts_pending_non_negative",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["profiles.id"]),
        sa.PrimaryKeyConstraint("user_id"),
    )

    op.create_table(
        "transactions",
        sa.Column("id", postgresql.UUID(as_uuid=True), primary_key=True),
        sa.Column("user_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("kind", sa.String(32), nullable=False),
        sa.Column("amount_cents", sa.BigInteger(), nullable=False),
        sa.Column("status", sa.String(16), nullable=False),
        sa.Column("related_id", postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column("balance_after_cents", sa.BigInteger(), nullable=True),
        sa.Column("idempotency_key", sa.String(128), nullable=False),
        sa.Column(
            "metadata",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False),
        sa.CheckConstraint(
            "kind IN ('DEPOSIT','PPV_DEBIT','CREATOR_EARNING','REFUND')",
            name="ck_transactions_kind",
        ),
        sa.CheckConstraint("status IN ('PENDING','COMPLETED','FAILED')", name="ck_transactions_status"),
        sa.CheckConstraint("amount_cents <> 0", name="ck_transactions_amount_non_zero"),
        sa.CheckConstraint(
            "(kind = 'PPV_DEBIT' AND amount_cents < 0) OR (kind <> 'PPV_DEBIT' AND amount_cents > 0)",
            name="ck_transactions_amount_sign",
        ),
        sa.ForeignKeyConstraint(["user_id"], ["wallet_accounts.user_id"]),
        sa.UniqueConstraint("idempotency_key", name="uq_transactions_idempotency_key"),
    )
    op.create_index("idx_transactions_user_created", "transactions", ["user_id", "created_at"])
    op.create_index("idx_transactions_related", "transactions", ["related_id"])
    op.create_index("idx_transactions_kind_status", "transactions", ["kind", "status"])

    op.create_table(
        "ledger_audit_runs",
        sa.Column("id", sa.BigInteger(), primary_key=True),
        sa.Column("started_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("finished_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(32), nullable=False),
        sa.Column("diff_count", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column(
            "details",
            postgresql.JSONB(astext_type=sa.Text()),
            nullable=False,
            server_default=sa.text("'{}'::jsonb"),
        ),
        sa.CheckConstraint("status IN ('OK','DIFF')", name="ck_ledger_audit_runs_status"),
    )
    op.create_index("idx_ledger_audit_runs_started", "ledger_audit_runs", ["started_at"])

    for table_name in APPEND_ONLY_TABLES:
        op.execute(
            f"""
            CREATE OR REPLACE FUNCTION fn_{table_name}_append_only()
            RETURNS trigger
            LANGUAGE plpgsql
            AS $$
            BEGIN
                RAISE EXCEPTION '{table_name} is append-only';
            END;
            $$;
            """
        )
        op.execute(
            f"""
            CREATE TRIGGER trg_{table_name}_append_only
            BEFORE UPDATE OR DELETE ON {table_name}
            FOR EACH ROW
            EXECUTE FUNCTION fn_{table_name}_append_only();
            """
        )


def downgrade() -> None:
    for table_name in APPEND_ONLY_TABLES:
        op.execute(f"DROP TRIGGER IF EXISTS trg_{table_name}_append_only ON {table_name};")
        op.execute(f"DROP FUNCTION IF EXISTS fn_{table_name}_append_only();")

    op.drop_index("idx_ledger_audit_runs_started", table_name="ledger_audit_runs")
    op.drop_table("ledger_audit_runs")
    op.drop_index("idx_transactions_kind_status", table_name="transactions")
    op.drop_index("idx_transactions_related", table_name="transactions")
    op.drop_index("idx_transactions_user_created", table_name="transactions")
    op.drop_table("transactions")
    op.drop_table("wallet_accounts")
    op.drop_index("idx_unlocks_creator_created", table_name="unlocks")
    op.drop_index("idx_unlocks_user_created", table_name="unlocks")
    op.drop_table("unlocks")
    op.drop_index("idx_subscriptions_creator_created", table_name="subscriptions")
    op.drop_table("subscriptions")
    op.drop_index("idx_posts_creator_created", table_name="posts")
    op.drop_table("posts")
    op.drop_index("idx_profiles_role", table_name="profiles")
    op.drop_table("profiles")
