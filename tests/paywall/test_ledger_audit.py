from __future__ import annotations

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace
from uuid import uuid4

import pytest

from app.paywall.audit import service
from app.paywall.audit.rules import audit_status, compute_audit_diff

UTC = timezone.utc
NOW = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)


def test_compute_audit_diff_sums_all_findings() -> None:
    assert (
        compute_audit_diff(
            negative_balance_count=0,
            balance_mismatch_count=0,
            unpaired_unlock_count=0,
            stale_pending_count=0,
        )
        == 0
    )
    assert (
        compute_audit_diff(
            negative_balance_count=1,
            balance_mismatch_count=2,
            unpaired_unlock_count=3,
            stale_pending_count=4,
        )
        == 10
    )
    assert audit_status(0) == "OK"
    assert audit_status(3) == "DIFF"


@pytest.mark.asyncio
async def test_run_ledger_audit_persists_run_with_details(monkeypatch) -> None:
    user_id = uuid4()
    unlock_id = uuid4()
    captured: dict[str, object] = {}

    async def _fake_negative(session, *, limit):
        return []

    async def _fake_mismatches(session, *, limit):
        return [(user_id, 500, 400)]

    async def _fake_unpaired(session, *, limit):
        return [unlock_id]

    async def _fake_stale(session, *, older_than_utc, limit):
        captured["older_than_utc"] = older_than_utc
        return []

    async def _fake_create_run(session, *, run):
        captured["run"] = run
        return run

    monkeypatch.setattr(service.WalletRepo, "list_negative_balances", _fake_negative)
    monkeypatch.setattr(service.TransactionsRepo, "list_balance_mismatches", _fake_mismatches)
    monkeypatch.setattr(service.TransactionsRepo, "list_unpaired_unlock_ids", _fake_unpaired)
    monkeypatch.setattr(service.TransactionsRepo, "list_stale_pending_ids", _fake_stale)
    monkeypatch.setattr(service.LedgerAuditRunsRepo, "create", _fake_create_run)
    monkeypatch.setattr(
        service,
        "get_settings",
        lambda: SimpleNamespace(ledger_audit_stale_pending_hours=24),
    )

    report = await service.LedgerAuditService.run_ledger_audit(object(), now_utc=NOW)

    assert report.status == "DIFF"
    assert report.diff_count == 2
    assert captured["older_than_utc"] == NOW - timedelta(hours=24)
    run = captured["run"]
    assert run.status == "DIFF"
    assert run.diff_count == 2
    assert run.details["unpaired_unlock_ids"] == [str(unlock_id)]
    assert run.details["balance_mismatches"] == [
        {"user_id": str(user_id), "available_balance_cents": 500, "ledger_total_cents": 400}
    ]
