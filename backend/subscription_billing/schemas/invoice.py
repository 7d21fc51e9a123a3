from datetime import datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


def _unwrap_list(value: Any) -> Any:
    """Accept provider list envelopes ({"object": "list", "data": [...]}) as plain lists."""
    if isinstance(value, dict) and "data" in value:
        return value["data"]
    return value


class LineItemType(str, Enum):
    INVOICE_ITEM = "invoiceitem"
    SUBSCRIPTION = "subscription"


class EventSource(str, Enum):
    PAYMENT_ATTEMPT = "payment_attempt"
    STATUS_TRANSITION = "status_transition"


class EventSeverity(str, Enum):
    SUCCESS = "success"
    WARNING = "warning"
    DANGER = "danger"
    NEUTRAL = "neutral"


class Coupon(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    percent_off: float | None = None
    amount_off: int | None = None


class Discount(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    coupon: Coupon | None = None


class StatusTransitions(BaseModel):
    """Invoice lifecycle timestamps, declared in provider order."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    finalized_at: int | None = None
    marked_uncollectible_at: int | None = None
    paid_at: int | None = None
    voided_at: int | None = None


class InvoiceLineItem(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str | None = None
    type: str
    amount: int = 0
    currency: str | None = None
    description: str | None = None
    quantity: int | None = None
    plan: str | None = None


class ProviderInvoiceSnapshot(BaseModel):
    """Read-only invoice as returned by the billing provider.

    Amounts are integer minor currency units. Timestamps are epoch seconds.
    Optional fields default to absent or zero since the provider omits them
    depending on invoice state.
    """

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    customer: str | None = None
    currency: str | None = None
    status: str | None = None
    created: int | None = None
    due_date: int | None = None
    next_payment_attempt: int | None = None
    paid: bool = False
    attempted: bool = False
    attempt_count: int = 0
    subtotal: int = 0
    tax: int | None = None
    total: int = 0
    starting_balance: int | None = None
    pre_payment_credit_notes_amount: int | None = None
    post_payment_credit_notes_amount: int | None = None
    discount: Discount | None = None
    lines: list[InvoiceLineItem] = Field(default_factory=list)
    status_transitions: StatusTransitions = Field(default_factory=StatusTransitions)

    @field_validator("lines", mode="before")
    @classmethod
    def unwrap_lines(cls, value: Any) -> Any:
        if value is None:
            return []
        return _unwrap_list(value)

    @field_validator("status_transitions", mode="before")
    @classmethod
    def default_status_transitions(cls, value: Any) -> Any:
        return {} if value is None else value


class ChargeAttempt(BaseModel):
    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    status: str
    created: int
    amount: int | None = None
    failure_message: str | None = None


class PaymentAttempt(BaseModel):
    """A payment attempt (payment intent) and the charges made under it."""

    model_config = ConfigDict(extra="ignore", frozen=True)

    id: str
    status: str
    created: int
    invoice: str | None = None
    amount: int | None = None
    charges: list[ChargeAttempt] = Field(default_factory=list)

    @field_validator("charges", mode="before")
    @classmethod
    def unwrap_charges(cls, value: Any) -> Any:
        if value is None:
            return []
        return _unwrap_list(value)


class BillingEvent(BaseModel):
    """A single entry in an invoice's merged history."""

    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    description: str
    source: EventSource
    severity: EventSeverity = EventSeverity.NEUTRAL
    resource_id: str | None = None  # ID of the payment attempt or charge
