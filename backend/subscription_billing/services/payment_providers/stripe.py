"""Stripe implementations of the subscription gateway and payment attempt source."""

import logging
from collections import defaultdict
from typing import Any

from subscription_billing.core.config import settings
from subscription_billing.schemas.invoice import PaymentAttempt
from subscription_billing.schemas.subscription import (
    CustomerHandle,
    RemoteSubscriptionResult,
    SubscriptionCreationRequest,
)

logger = logging.getLogger(__name__)


class StripeClientMixin:
    """Lazy access to the stripe module configured with the API key."""

    def __init__(self, api_key: str | None = None):
        self.api_key = api_key or settings.stripe_api_key
        self._stripe: Any = None

    @property
    def stripe(self) -> Any:
        """Lazy-load stripe module."""
        if self._stripe is None:
            try:
                import stripe

                stripe.api_key = self.api_key
                self._stripe = stripe
            except ImportError as e:
                raise ImportError("stripe package not installed. Run: pip install stripe") from e
        return self._stripe


class StripeSubscriptionGateway(StripeClientMixin):
    def submit(
        self, request: SubscriptionCreationRequest, customer: CustomerHandle
    ) -> RemoteSubscriptionResult:
        """Create the subscription for the customer from the sparse payload."""
        subscription = self.stripe.Subscription.create(
            customer=customer.id,
            **request.to_payload(),
        )
        logger.info(
            "Stripe subscription %s created for customer %s with status %s",
            subscription["id"],
            customer.id,
            subscription["status"],
        )
        return RemoteSubscriptionResult(id=subscription["id"], status=subscription["status"])

    def cancel(self, subscription_id: str) -> None:
        self.stripe.Subscription.cancel(subscription_id)
        logger.info("Stripe subscription %s cancelled", subscription_id)


class StripePaymentAttemptSource(StripeClientMixin):
    def list_for_customer(self, customer_id: str) -> list[PaymentAttempt]:
        """List the customer's payment intents with their charges nested under them.

        Charges are fetched in one listing and grouped by payment intent since
        current API versions no longer embed them in the intent.
        """
        intents = self.stripe.PaymentIntent.list(customer=customer_id)
        charges = self.stripe.Charge.list(customer=customer_id)

        charges_by_intent: dict[str, list[dict[str, Any]]] = defaultdict(list)
        for charge in charges.auto_paging_iter():
            data = charge.to_dict()
            if data.get("payment_intent"):
                charges_by_intent[data["payment_intent"]].append(data)

        attempts: list[PaymentAttempt] = []
        for intent in intents.auto_paging_iter():
            data = intent.to_dict()
            data["charges"] = charges_by_intent.get(data["id"], [])
            attempts.append(PaymentAttempt.model_validate(data))
        return attempts
