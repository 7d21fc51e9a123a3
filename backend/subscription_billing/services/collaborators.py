"""Interfaces of the services the builder and invoice view call out to.

Concrete implementations live elsewhere: the SQLAlchemy store in
``repositories``, the Stripe gateway in ``services.payment_providers``.
The owner account is supplied by the host application.
"""

from collections.abc import Mapping, Sequence
from typing import Any, Protocol

from subscription_billing.schemas.invoice import PaymentAttempt
from subscription_billing.schemas.subscription import (
    CustomerHandle,
    LocalSubscriptionCreate,
    RemoteSubscriptionResult,
    SubscriptionCreationRequest,
)


class OwnerAccount(Protocol):
    """The account (user, team, organization) that is subscribing."""

    def ensure_remote_customer(self, options: Mapping[str, Any]) -> CustomerHandle: ...

    def attach_payment_method(self, token: str) -> None: ...

    def resolve_tax_percentage(self) -> float | None: ...


class SubscriptionGateway(Protocol):
    def submit(
        self, request: SubscriptionCreationRequest, customer: CustomerHandle
    ) -> RemoteSubscriptionResult: ...

    def cancel(self, subscription_id: str) -> None: ...


class PaymentAttemptSource(Protocol):
    def list_for_customer(self, customer_id: str) -> Sequence[PaymentAttempt]: ...


class LocalSubscriptionStore(Protocol):
    def persist(self, data: LocalSubscriptionCreate) -> Any: ...


class CurrencyFormatter(Protocol):
    def format(self, amount: int, currency: str) -> str: ...
