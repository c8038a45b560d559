from app.paywall.entitlements.access import AccessService
from app.paywall.entitlements.service import EntitlementService

__all__ = ["AccessService", "EntitlementService"]
