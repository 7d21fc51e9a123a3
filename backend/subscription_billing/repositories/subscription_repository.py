from uuid import UUID

from sqlalchemy.orm import Session

from subscription_billing.models.subscription import Subscription
from subscription_billing.schemas.subscription import LocalSubscriptionCreate


class SubscriptionRepository:
    """Local subscription records of one owner account."""

    def __init__(self, db: Session, owner_id: str):
        self.db = db
        self.owner_id = owner_id

    def get_by_owner(self) -> list[Subscription]:
        return (
            self.db.query(Subscription)
            .filter(Subscription.owner_id == self.owner_id)
            .order_by(Subscription.created_at.desc())
            .all()
        )

    def get_by_id(self, subscription_id: UUID) -> Subscription | None:
        return (
            self.db.query(Subscription)
            .filter(Subscription.id == subscription_id, Subscription.owner_id == self.owner_id)
            .first()
        )

    def get_by_provider_id(self, provider_id: str) -> Subscription | None:
        return (
            self.db.query(Subscription)
            .filter(Subscription.provider_id == provider_id, Subscription.owner_id == self.owner_id)
            .first()
        )

    def persist(self, data: LocalSubscriptionCreate) -> Subscription:
        subscription = Subscription(
            owner_id=self.owner_id,
            name=data.name,
            provider_id=data.provider_id,
            provider_plan=data.provider_plan,
            quantity=data.quantity,
            trial_ends_at=data.trial_ends_at,
            ends_at=data.ends_at,
        )
        self.db.add(subscription)
        self.db.commit()
        self.db.refresh(subscription)
        return subscription
