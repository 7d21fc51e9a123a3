from subscription_billing.repositories.subscription_repository import SubscriptionRepository

__all__ = [
    "SubscriptionRepository",
]
