from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.models.ledger_audit_runs import LedgerAuditRun


class LedgerAuditRunsRepo:
    @staticmethod
    async def create(session: AsyncSession, *, run: LedgerAuditRun) -> LedgerAuditRun:
        session.add(run)
        await session.flush()
        return run

    @staticmethod
    async def get_latest(session: AsyncSession) -> LedgerAuditRun | None:
        stmt = select(LedgerAuditRun).order_by(LedgerAuditRun.started_at.desc()).limit(1)
        result = await session.execute(stmt)
        return result.scalar_one_or_none()
