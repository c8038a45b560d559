from __future__ import annotations

from datetime import datetime, timezone
from types import SimpleNamespace

from fastapi.testclient import TestClient

from app.api.routes import internal_ledger
from app.core import internal_auth
from app.main import app
from app.paywall.audit.types import LedgerAuditReport
from tests.api.helpers import DummySessionLocal

NOW = datetime(2026, 3, 1, 12, 0, tzinfo=timezone.utc)


def _settings(*, allowlist: str) -> SimpleNamespace:
    return SimpleNamespace(
        internal_api_token="internal-secret",
        internal_api_allowlist=allowlist,
        internal_api_trusted_proxies="",
    )


def test_internal_ledger_audit_rejects_missing_token(monkeypatch) -> None:
    monkeypatch.setattr(internal_auth, "get_settings", lambda: _settings(allowlist="0.0.0.0/0"))

    client = TestClient(app)
    response = client.post("/internal/ledger/audit")

    assert response.status_code == 403
    assert response.json() == {"detail": {"code": "E_FORBIDDEN"}}


def test_internal_ledger_audit_rejects_disallowed_ip(monkeypatch) -> None:
    monkeypatch.setattr(internal_auth, "get_settings", lambda: _settings(allowlist="192.168.0.0/16"))

    client = TestClient(app, client=("127.0.0.1", 5202))
    response = client.post(
        "/internal/ledger/audit",
        headers={"X-Internal-Token": "internal-secret", "X-Forwarded-For": "192.168.1.2"},
    )

    assert response.status_code == 403


def test_internal_ledger_audit_runs_report(monkeypatch) -> None:
    monkeypatch.setattr(internal_auth, "get_settings", lambda: _settings(allowlist="127.0.0.1/32"))

    async def _fake_audit(session, *, now_utc):
        return LedgerAuditReport(started_at=NOW, finished_at=NOW, status="OK", diff_count=0)

    monkeypatch.setattr(internal_ledger, "SessionLocal", DummySessionLocal())
    monkeypatch.setattr(internal_ledger.LedgerAuditService, "run_ledger_audit", _fake_audit)

    client = TestClient(app, client=("127.0.0.1", 5201))
    response = client.post("/internal/ledger/audit", headers={"X-Internal-Token": "internal-secret"})

    assert response.status_code == 200
    payload = response.json()
    assert payload["status"] == "OK"
    assert payload["diffCount"] == 0
    assert payload["details"]["unpaired_unlock_ids"] == []
