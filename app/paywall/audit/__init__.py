from app.paywall.audit.service import LedgerAuditService

__all__ = ["LedgerAuditService"]
