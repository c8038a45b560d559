from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends

from app.api.models import LedgerAuditResponse
from app.core.internal_auth import require_internal_access
from app.db.session import SessionLocal
from app.paywall.audit.service import LedgerAuditService

router = APIRouter(tags=["internal", "ledger"], dependencies=[Depends(require_internal_access)])


@router.post("/internal/ledger/audit", response_model=LedgerAuditResponse)
async def run_ledger_audit() -> LedgerAuditResponse:
    async with SessionLocal.begin() as session:
        report = await LedgerAuditService.run_ledger_audit(
            session,
            now_utc=datetime.now(timezone.utc),
        )
    return LedgerAuditResponse(
        started_at=report.started_at,
        finished_at=report.finished_at,
        status=report.status,
        diff_count=report.diff_count,
        details=report.as_details(),
    )
