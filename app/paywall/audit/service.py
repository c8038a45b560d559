from __future__ import annotations

from datetime import datetime, timedelta, timezone

import structlog
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import get_settings
from app.db.models.ledger_audit_runs import LedgerAuditRun
from app.db.repo.ledger_audit_runs_repo import LedgerAuditRunsRepo
from app.db.repo.transactions_repo import TransactionsRepo
from app.db.repo.wallet_repo import WalletRepo
from app.paywall.audit.rules import audit_status, compute_audit_diff
from app.paywall.audit.types import BalanceMismatch, LedgerAuditReport

logger = structlog.get_logger(__name__)


class LedgerAuditService:
    @staticmethod
    async def run_ledger_audit(
        session: AsyncSession,
        *,
        now_utc: datetime,
        limit: int = 100,
    ) -> LedgerAuditReport:
        stale_cutoff = now_utc - timedelta(hours=get_settings().ledger_audit_stale_pending_hours)

        negative_balance_user_ids = await WalletRepo.list_negative_balances(session, limit=limit)
        mismatches = await TransactionsRepo.list_balance_mismatches(session, limit=limit)
        unpaired_unlock_ids = await TransactionsRepo.list_unpaired_unlock_ids(session, limit=limit)
        stale_pending_ids = await TransactionsRepo.list_stale_pending_ids(
            session,
            older_than_utc=stale_cutoff,
            limit=limit,
        )

        diff_count = compute_audit_diff(
            negative_balance_count=len(negative_balance_user_ids),
            balance_mismatch_count=len(mismatches),
            unpaired_unlock_count=len(unpaired_unlock_ids),
            stale_pending_count=len(stale_pending_ids),
        )
        report = LedgerAuditReport(
            started_at=now_utc,
            finished_at=datetime.now(timezone.utc),
            status=audit_status(diff_count),
            diff_count=diff_count,
            negative_balance_user_ids=negative_balance_user_ids,
            balance_mismatches=[
                BalanceMismatch(
                    user_id=user_id,
                    available_balance_cents=balance,
                    ledger_total_cents=total,
                )
                for user_id, balance, total in mismatches
            ],
            unpaired_unlock_ids=unpaired_unlock_ids,
            stale_pending_transaction_ids=stale_pending_ids,
        )

        await LedgerAuditRunsRepo.create(
            session,
            run=LedgerAuditRun(
                started_at=report.started_at,
                finished_at=report.finished_at,
                status=report.status,
                diff_count=report.diff_count,
                details=report.as_details(),
            ),
        )

        summary = {
            "status": report.status,
            "diff_count": report.diff_count,
            "negative_balance_count": len(report.negative_balance_user_ids),
            "balance_mismatch_count": len(report.balance_mismatches),
            "unpaired_unlock_count": len(report.unpaired_unlock_ids),
            "stale_pending_count": len(report.stale_pending_transaction_ids),
        }
        if report.diff_count > 0:
            logger.warning("ledger_audit_diff", **summary)
        else:
            logger.info("ledger_audit_finished", **summary)
        return report
