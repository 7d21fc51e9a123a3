from subscription_billing.models.shared import UUIDType, generate_uuid
from subscription_billing.models.subscription import Subscription

__all__ = [
    "Subscription",
    "UUIDType",
    "generate_uuid",
]
