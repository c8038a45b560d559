from app.paywall.ledger.service import LedgerService

__all__ = ["LedgerService"]
