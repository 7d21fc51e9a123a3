"""Builder that turns chained subscription options into a provider creation request."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from datetime import UTC, date, datetime, time, timedelta
from typing import Any

from pydantic import ValidationError

from subscription_billing.core.clock import Clock, SystemClock
from subscription_billing.core.config import settings
from subscription_billing.core.exceptions import InvalidConfiguration, SubscriptionCreationFailed
from subscription_billing.schemas.subscription import (
    CollectionMethod,
    CustomerHandle,
    LocalSubscriptionCreate,
    SubscriptionCreationRequest,
)
from subscription_billing.services.collaborators import (
    LocalSubscriptionStore,
    OwnerAccount,
    SubscriptionGateway,
)

logger = logging.getLogger(__name__)


# ── Trial policy ───────────────────────────────────────────────────


@dataclass(frozen=True)
class NoTrial:
    pass


@dataclass(frozen=True)
class TrialUntil:
    ends_at: datetime


@dataclass(frozen=True)
class SkipTrial:
    pass


TrialPolicy = NoTrial | TrialUntil | SkipTrial


# ── Billing mode ───────────────────────────────────────────────────


@dataclass(frozen=True)
class ChargeAutomatically:
    pass


@dataclass(frozen=True)
class SendInvoice:
    days_until_due: int | None = None


BillingMode = ChargeAutomatically | SendInvoice


@dataclass
class SubscriptionConfiguration:
    """Options accumulated by a builder before they are resolved into a request."""

    plan: str
    quantity: int = 1
    trial: TrialPolicy = field(default_factory=NoTrial)
    billing_cycle_anchor: int | None = None
    coupon: str | None = None
    metadata: dict[str, str] | None = None
    billing_mode: BillingMode = field(default_factory=ChargeAutomatically)
    tax_rates: list[str] = field(default_factory=list)


def _as_utc(dt: datetime) -> datetime:
    # Naive datetimes are taken to be UTC
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt


def _to_epoch(value: datetime | date | int) -> int:
    if isinstance(value, datetime):
        return int(_as_utc(value).timestamp())
    if isinstance(value, date):
        return int(datetime.combine(value, time.min, tzinfo=UTC).timestamp())
    return int(value)


class SubscriptionRequestBuilder:
    """Accumulate subscription options and create the subscription at the provider.

    Setters return the builder so calls can be chained, and none of them
    validates; validation happens in ``build``::

        subscription = (
            SubscriptionRequestBuilder(owner, "default", "price_monthly", gateway=gw, store=store)
            .with_trial_days(14)
            .with_coupon("WELCOME")
            .create(payment_token)
        )

    A builder is single-owner and not safe for concurrent configuration.
    """

    def __init__(
        self,
        owner: OwnerAccount,
        name: str,
        plan: str,
        gateway: SubscriptionGateway | None = None,
        store: LocalSubscriptionStore | None = None,
        clock: Clock | None = None,
    ):
        self.owner = owner
        self.name = name
        self.gateway = gateway
        self.store = store
        self.clock = clock or SystemClock()
        self._config = SubscriptionConfiguration(plan=plan)

    @property
    def configuration(self) -> SubscriptionConfiguration:
        """A copy of the options accumulated so far."""
        metadata = self._config.metadata
        return replace(
            self._config,
            metadata=dict(metadata) if metadata is not None else None,
            tax_rates=list(self._config.tax_rates),
        )

    def with_quantity(self, quantity: int) -> SubscriptionRequestBuilder:
        self._config.quantity = quantity
        return self

    def with_trial_days(self, trial_days: int) -> SubscriptionRequestBuilder:
        """Trial until now + ``trial_days``, computed at call time."""
        return self._set_trial(TrialUntil(_as_utc(self.clock.now()) + timedelta(days=trial_days)))

    def with_trial_until(self, trial_until: datetime | int) -> SubscriptionRequestBuilder:
        if isinstance(trial_until, datetime):
            ends_at = _as_utc(trial_until)
        else:
            ends_at = datetime.fromtimestamp(trial_until, tz=UTC)
        return self._set_trial(TrialUntil(ends_at))

    def skip_trial(self) -> SubscriptionRequestBuilder:
        """End the trial immediately.

        Sticky: a trial length set before or after this call is ignored.
        """
        self._config.trial = SkipTrial()
        return self

    def send_invoices(self, days_until_due: int | None = None) -> SubscriptionRequestBuilder:
        """Email invoices instead of charging the default payment method."""
        if days_until_due is None:
            days_until_due = settings.DEFAULT_DAYS_UNTIL_DUE
        self._config.billing_mode = SendInvoice(days_until_due)
        return self

    def charge_automatically(self) -> SubscriptionRequestBuilder:
        self._config.billing_mode = ChargeAutomatically()
        return self

    def anchor_billing_cycle_on(self, anchor: datetime | date | int) -> SubscriptionRequestBuilder:
        self._config.billing_cycle_anchor = _to_epoch(anchor)
        return self

    def with_coupon(self, coupon: str) -> SubscriptionRequestBuilder:
        self._config.coupon = coupon
        return self

    def with_metadata(self, metadata: Mapping[str, str]) -> SubscriptionRequestBuilder:
        self._config.metadata = dict(metadata)
        return self

    def with_tax_rate(self, tax_rate_id: str) -> SubscriptionRequestBuilder:
        self._config.tax_rates.append(tax_rate_id)
        return self

    def _set_trial(self, policy: TrialPolicy) -> SubscriptionRequestBuilder:
        if not isinstance(self._config.trial, SkipTrial):
            self._config.trial = policy
        return self

    # ── Resolution ─────────────────────────────────────────────────

    def build(self) -> SubscriptionCreationRequest:
        """Resolve the accumulated options into a creation request.

        Raises:
            InvalidConfiguration: If the plan is missing, the quantity is not
                positive, invoice billing has no due-date window, or an option
                has the wrong type.
        """
        config = self._config
        self._validate(config)

        fields: dict[str, Any] = {
            "plan": config.plan,
            "quantity": config.quantity,
        }

        if isinstance(config.billing_mode, SendInvoice):
            fields["collection_method"] = CollectionMethod.SEND_INVOICE
            fields["days_until_due"] = config.billing_mode.days_until_due
        else:
            fields["collection_method"] = CollectionMethod.CHARGE_AUTOMATICALLY

        trial_end = self._trial_end_for_payload()
        if trial_end is not None:
            fields["trial_end"] = trial_end

        if config.billing_cycle_anchor is not None:
            fields["billing_cycle_anchor"] = config.billing_cycle_anchor
        if config.coupon is not None:
            fields["coupon"] = config.coupon
        if config.metadata is not None:
            fields["metadata"] = config.metadata

        tax_percent = self.owner.resolve_tax_percentage()
        if tax_percent is not None:
            fields["tax_percent"] = tax_percent

        try:
            return SubscriptionCreationRequest(**fields)
        except ValidationError as e:
            raise InvalidConfiguration(f"Invalid subscription options: {e}") from e

    def _validate(self, config: SubscriptionConfiguration) -> None:
        if not config.plan:
            raise InvalidConfiguration("A plan identifier is required")
        if config.quantity < 1:
            raise InvalidConfiguration(f"Quantity must be at least 1, got {config.quantity}")
        if isinstance(config.billing_mode, SendInvoice):
            days = config.billing_mode.days_until_due
            if days is None or days < 0:
                raise InvalidConfiguration(
                    "Invoice billing requires a non-negative number of days until due"
                )

    def _trial_end_for_payload(self) -> str | int | None:
        trial = self._config.trial
        if isinstance(trial, SkipTrial):
            return "now"
        if isinstance(trial, TrialUntil):
            return int(trial.ends_at.timestamp())
        return None

    def _trial_ends_at(self) -> datetime | None:
        trial = self._config.trial
        if isinstance(trial, TrialUntil):
            return trial.ends_at
        return None

    # ── Creation ───────────────────────────────────────────────────

    def add(self, options: Mapping[str, Any] | None = None) -> Any:
        """Create the subscription without collecting a new payment method."""
        return self.create(None, options)

    def create(self, token: str | None = None, options: Mapping[str, Any] | None = None) -> Any:
        """Create the subscription at the provider and record it locally.

        An incomplete remote subscription is cancelled before
        SubscriptionCreationFailed is raised, and nothing is persisted.

        Returns:
            Whatever the local store returns from ``persist``.
        """
        if self.gateway is None or self.store is None:
            raise ValueError(
                "A subscription gateway and store are required to create subscriptions"
            )

        request = self.build()
        customer = self._get_remote_customer(token, options or {})

        result = self.gateway.submit(request, customer)

        if result.status in settings.INCOMPLETE_SUBSCRIPTION_STATUSES:
            logger.warning(
                "Cancelling subscription %s for customer %s: provider returned status %s",
                result.id,
                customer.id,
                result.status,
            )
            self.gateway.cancel(result.id)
            raise SubscriptionCreationFailed.incomplete(result)

        subscription = self.store.persist(
            LocalSubscriptionCreate(
                name=self.name,
                provider_id=result.id,
                provider_plan=self._config.plan,
                quantity=self._config.quantity,
                trial_ends_at=self._trial_ends_at(),
                ends_at=None,
            )
        )
        logger.info(
            "Created subscription %s (%s) on plan %s with status %s",
            result.id,
            self.name,
            self._config.plan,
            result.status,
        )
        return subscription

    def _get_remote_customer(self, token: str | None, options: Mapping[str, Any]) -> CustomerHandle:
        customer = self.owner.ensure_remote_customer(options)
        if token:
            self.owner.attach_payment_method(token)
        return customer
