"""Read-only view over a provider invoice: derived amounts and event history."""

import logging
from datetime import UTC, datetime, tzinfo
from zoneinfo import ZoneInfo

from subscription_billing.core.clock import Clock, SystemClock
from subscription_billing.core.config import settings
from subscription_billing.schemas.invoice import (
    BillingEvent,
    EventSeverity,
    EventSource,
    InvoiceLineItem,
    LineItemType,
    PaymentAttempt,
    ProviderInvoiceSnapshot,
)
from subscription_billing.services.collaborators import CurrencyFormatter, PaymentAttemptSource
from subscription_billing.services.currency import DefaultCurrencyFormatter

logger = logging.getLogger(__name__)

FAILED_CHARGE_STATUS = "failed"
MISSING_PAYMENT_METHOD_STATUS = "requires_payment_method"


def _from_epoch(timestamp: int, tz: tzinfo | str | None = None) -> datetime:
    dt = datetime.fromtimestamp(timestamp, tz=UTC)
    if tz is None:
        return dt
    if isinstance(tz, str):
        tz = ZoneInfo(tz)
    return dt.astimezone(tz)


def _describe_transition(name: str) -> str:
    """``marked_uncollectible_at`` -> ``Invoice was marked uncollectible``."""
    status = name.removesuffix("_at").replace("_", " ")
    return f"Invoice was {status}"


class InvoiceView:
    """Wrap a ProviderInvoiceSnapshot without mutating it.

    Monetary ``raw_*`` values and ``discount_amount`` are integer minor units;
    the unprefixed methods (``total``, ``tax``, ...) return display strings
    produced by the currency formatter.
    """

    def __init__(
        self,
        invoice: ProviderInvoiceSnapshot,
        payment_attempts: PaymentAttemptSource | None = None,
        formatter: CurrencyFormatter | None = None,
        clock: Clock | None = None,
        customer_id: str | None = None,
    ):
        self.invoice = invoice
        self.payment_attempt_source = payment_attempts
        self.formatter = formatter or DefaultCurrencyFormatter()
        self.clock = clock or SystemClock()
        self.customer_id = customer_id or invoice.customer

    # ── Identity ───────────────────────────────────────────────────

    @property
    def id(self) -> str:
        return self.invoice.id

    @property
    def currency(self) -> str:
        return self.invoice.currency or settings.DEFAULT_CURRENCY

    @property
    def paid(self) -> bool:
        return self.invoice.paid

    @property
    def status(self) -> str | None:
        return self.invoice.status

    def as_provider_invoice(self) -> ProviderInvoiceSnapshot:
        return self.invoice

    # ── Dates ──────────────────────────────────────────────────────

    def date(self, tz: tzinfo | str | None = None) -> datetime | None:
        if self.invoice.created is None:
            return None
        return _from_epoch(self.invoice.created, tz)

    def due_date(self, tz: tzinfo | str | None = None) -> datetime | None:
        if self.invoice.due_date is None:
            return None
        return _from_epoch(self.invoice.due_date, tz)

    def next_attempt_date(self, tz: tzinfo | str | None = None) -> datetime | None:
        if self.invoice.next_payment_attempt is None:
            return None
        return _from_epoch(self.invoice.next_payment_attempt, tz)

    def past_due(self, tz: tzinfo | str | None = None) -> bool:
        """Unpaid, with a due date, and either attempted already or overdue."""
        due = self.due_date(tz)
        if due is None or self.invoice.paid:
            return False
        if self.invoice.attempted and self.invoice.attempt_count > 0:
            return True
        return due < self.clock.now()

    # ── Amounts ────────────────────────────────────────────────────

    def raw_starting_balance(self) -> int:
        return self.invoice.starting_balance or 0

    def raw_total(self) -> int:
        return self.invoice.total + self.raw_starting_balance()

    def has_starting_balance(self) -> bool:
        return self.raw_starting_balance() < 0

    def raw_credit_balance(self) -> int:
        return (self.invoice.pre_payment_credit_notes_amount or 0) + (
            self.invoice.post_payment_credit_notes_amount or 0
        )

    def has_credit_balance(self) -> bool:
        return self.raw_credit_balance() > 0

    def has_discount(self) -> bool:
        return (
            self.invoice.subtotal > 0
            and self.invoice.subtotal != self.invoice.total
            and self.invoice.discount is not None
        )

    def discount_amount(self) -> int:
        return self.invoice.subtotal + (self.invoice.tax or 0) - self.invoice.total

    def coupon(self) -> str | None:
        discount = self.invoice.discount
        if discount is None or discount.coupon is None:
            return None
        return discount.coupon.id

    def discount_is_percentage(self) -> bool:
        return self.coupon() is not None and self.invoice.discount.coupon.percent_off is not None

    def percent_off(self) -> float:
        if self.discount_is_percentage():
            return self.invoice.discount.coupon.percent_off
        return 0

    def raw_amount_off(self) -> int:
        if self.coupon() is not None and self.invoice.discount.coupon.amount_off is not None:
            return self.invoice.discount.coupon.amount_off
        return 0

    def format_amount(self, amount: int) -> str:
        return self.formatter.format(amount, self.currency)

    def total(self) -> str:
        return self.format_amount(self.raw_total())

    def subtotal(self) -> str:
        return self.format_amount(self.invoice.subtotal)

    def tax(self) -> str:
        return self.format_amount(self.invoice.tax or 0)

    def starting_balance(self) -> str:
        return self.format_amount(self.raw_starting_balance())

    def credit_balance(self) -> str:
        return self.format_amount(self.raw_credit_balance())

    def discount(self) -> str:
        return self.format_amount(self.discount_amount())

    def amount_off(self) -> str:
        return self.format_amount(self.raw_amount_off())

    # ── Line items ─────────────────────────────────────────────────

    def invoice_items_by_type(self, item_type: LineItemType | str) -> list[InvoiceLineItem]:
        kind = item_type.value if isinstance(item_type, LineItemType) else item_type
        return [line for line in self.invoice.lines if line.type == kind]

    def invoice_items(self) -> list[InvoiceLineItem]:
        return self.invoice_items_by_type(LineItemType.INVOICE_ITEM)

    def subscriptions(self) -> list[InvoiceLineItem]:
        return self.invoice_items_by_type(LineItemType.SUBSCRIPTION)

    # ── History ────────────────────────────────────────────────────

    def payment_attempts(self) -> list[PaymentAttempt]:
        """Payment attempts of the invoice's customer that reference this invoice."""
        if self.payment_attempt_source is None or self.customer_id is None:
            return []
        attempts = self.payment_attempt_source.list_for_customer(self.customer_id)
        return [attempt for attempt in attempts if attempt.invoice == self.invoice.id]

    def history(self) -> list[BillingEvent]:
        """Payment attempts and status transitions merged, newest first.

        Events sharing a timestamp keep their relative order, so payment
        events come before status transitions at the same instant.
        """
        attempts = self.payment_attempts()
        logger.debug("Invoice %s has %d payment attempts", self.invoice.id, len(attempts))

        events = self._payment_events(attempts) + self._transition_events()
        return sorted(events, key=lambda e: e.timestamp, reverse=True)

    def _payment_events(self, attempts: list[PaymentAttempt]) -> list[BillingEvent]:
        events: list[BillingEvent] = []
        for attempt in attempts:
            if attempt.charges:
                for charge in attempt.charges:
                    description = f"Charge {charge.status}"
                    if charge.failure_message:
                        description = f"{description}: {charge.failure_message}"
                    events.append(
                        BillingEvent(
                            timestamp=_from_epoch(charge.created),
                            description=description,
                            source=EventSource.PAYMENT_ATTEMPT,
                            severity=(
                                EventSeverity.DANGER
                                if charge.status == FAILED_CHARGE_STATUS
                                else EventSeverity.NEUTRAL
                            ),
                            resource_id=charge.id,
                        )
                    )
            else:
                events.append(
                    BillingEvent(
                        timestamp=_from_epoch(attempt.created),
                        description=f"Payment {attempt.status.replace('_', ' ')}",
                        source=EventSource.PAYMENT_ATTEMPT,
                        severity=(
                            EventSeverity.DANGER
                            if attempt.status == MISSING_PAYMENT_METHOD_STATUS
                            else EventSeverity.NEUTRAL
                        ),
                        resource_id=attempt.id,
                    )
                )
        return events

    def _transition_events(self) -> list[BillingEvent]:
        transitions = self.invoice.status_transitions
        events: list[BillingEvent] = []
        # Reverse declaration order; the final sort relies on it for ties
        for name in reversed(list(type(transitions).model_fields)):
            timestamp = getattr(transitions, name)
            if timestamp is None:
                continue
            if name == "finalized_at" and self.invoice.paid:
                name = "created_at"
            if name == "paid_at" and self.invoice.paid:
                severity = EventSeverity.SUCCESS
            elif name in ("voided_at", "marked_uncollectible_at"):
                severity = EventSeverity.WARNING
            else:
                severity = EventSeverity.NEUTRAL
            events.append(
                BillingEvent(
                    timestamp=_from_epoch(timestamp),
                    description=_describe_transition(name),
                    source=EventSource.STATUS_TRANSITION,
                    severity=severity,
                )
            )
        return events
