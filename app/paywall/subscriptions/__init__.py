from app.paywall.subscriptions.service import SubscriptionService

__all__ = ["SubscriptionService"]
