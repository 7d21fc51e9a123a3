from subscription_billing.schemas.invoice import (
    BillingEvent,
    ChargeAttempt,
    Coupon,
    Discount,
    EventSeverity,
    EventSource,
    InvoiceLineItem,
    LineItemType,
    PaymentAttempt,
    ProviderInvoiceSnapshot,
    StatusTransitions,
)
from subscription_billing.schemas.subscription import (
    CollectionMethod,
    CustomerHandle,
    LocalSubscriptionCreate,
    RemoteSubscriptionResult,
    SubscriptionCreationRequest,
)

__all__ = [
    "BillingEvent",
    "ChargeAttempt",
    "CollectionMethod",
    "Coupon",
    "CustomerHandle",
    "Discount",
    "EventSeverity",
    "EventSource",
    "InvoiceLineItem",
    "LineItemType",
    "LocalSubscriptionCreate",
    "PaymentAttempt",
    "ProviderInvoiceSnapshot",
    "RemoteSubscriptionResult",
    "StatusTransitions",
    "SubscriptionCreationRequest",
]
