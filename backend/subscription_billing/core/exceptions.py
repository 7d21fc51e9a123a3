"""Errors raised while building and creating provider subscriptions."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from subscription_billing.schemas.subscription import RemoteSubscriptionResult


class InvalidConfiguration(ValueError):
    """The accumulated subscription configuration cannot produce a request."""


class SubscriptionCreationFailed(RuntimeError):
    """The provider created the subscription in a state we refuse to record.

    The remote subscription has already been cancelled by the time this is raised.
    """

    def __init__(self, message: str, subscription_id: str, status: str):
        super().__init__(message)
        self.subscription_id = subscription_id
        self.status = status

    @classmethod
    def incomplete(cls, result: RemoteSubscriptionResult) -> SubscriptionCreationFailed:
        return cls(
            f'The attempt to create a subscription failed because of an incomplete status '
            f'"{result.status}" on subscription "{result.id}".',
            subscription_id=result.id,
            status=result.status,
        )
