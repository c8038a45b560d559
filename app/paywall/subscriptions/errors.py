class SubscriptionError(Exception):
    pass


class SubscriptionTargetNotFoundError(SubscriptionError):
    pass


class SubscriptionValidationError(SubscriptionError):
    pass
