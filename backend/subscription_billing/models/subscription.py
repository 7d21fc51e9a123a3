from sqlalchemy import Column, DateTime, Integer, String, func

from subscription_billing.core.database import Base
from subscription_billing.models.shared import UUIDType, generate_uuid


class Subscription(Base):
    """Local record of a subscription that exists at the billing provider."""

    __tablename__ = "subscriptions"

    id = Column(UUIDType, primary_key=True, default=generate_uuid)
    owner_id = Column(String(255), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    provider_id = Column(String(255), unique=True, index=True, nullable=False)
    provider_plan = Column(String(255), nullable=False)
    quantity = Column(Integer, nullable=False, default=1)
    trial_ends_at = Column(DateTime(timezone=True), nullable=True)
    ends_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), server_default=func.now())
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())
