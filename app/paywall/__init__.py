from app.paywall.audit import LedgerAuditService
from app.paywall.entitlements import AccessService, EntitlementService
from app.paywall.ledger import LedgerService
from app.paywall.posts import PostService
from app.paywall.subscriptions import SubscriptionService
from app.paywall.unlocks import UnlockService

__all__ = [
    "AccessService",
    "EntitlementService",
    "LedgerAuditService",
    "LedgerService",
    "PostService",
    "SubscriptionService",
    "UnlockService",
]
