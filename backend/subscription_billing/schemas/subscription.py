from datetime import datetime
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field


class CollectionMethod(str, Enum):
    CHARGE_AUTOMATICALLY = "charge_automatically"
    SEND_INVOICE = "send_invoice"


class SubscriptionCreationRequest(BaseModel):
    """Sparse subscription creation request sent to the billing provider.

    Only fields that were explicitly given at construction are serialized by
    ``to_payload``. The provider treats an absent field differently from an
    explicit null, so unset fields must never appear as keys.
    """

    model_config = ConfigDict(frozen=True)

    plan: str = Field(..., min_length=1)
    quantity: int | None = None
    trial_end: Literal["now"] | int | None = None
    coupon: str | None = None
    metadata: dict[str, str] | None = None
    collection_method: CollectionMethod | None = None
    days_until_due: int | None = None
    tax_percent: float | None = None
    billing_cycle_anchor: int | None = None

    def to_payload(self) -> dict[str, Any]:
        return self.model_dump(mode="json", exclude_unset=True)


class CustomerHandle(BaseModel):
    """Provider-side customer the subscription is created for."""

    id: str
    email: str | None = None


class RemoteSubscriptionResult(BaseModel):
    id: str
    status: str


class LocalSubscriptionCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    provider_id: str = Field(..., min_length=1, max_length=255)
    provider_plan: str = Field(..., min_length=1, max_length=255)
    quantity: int = 1
    trial_ends_at: datetime | None = None
    ends_at: datetime | None = None

