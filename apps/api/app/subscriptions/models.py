from __future__ import annotations

import uuid
from datetime import date

from sqlalchemy import BigInteger, CheckConstraint, Date, Index, String, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.database import Base
from app.subscriptions.entity import Subscription


class SubscriptionRecord(Base):
    __tablename__ = "subscriptions"

    id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), primary_key=True)
    service_name: Mapped[str] = mapped_column(String(255), nullable=False)
    price: Mapped[int] = mapped_column(BigInteger, nullable=False)
    user_id: Mapped[uuid.UUID] = mapped_column(Uuid(as_uuid=True), nullable=False)
    start_date: Mapped[date] = mapped_column(Date(), nullable=False)
    end_date: Mapped[date | None] = mapped_column(Date(), nullable=True)

    __table_args__ = (
        CheckConstraint("price >= 0", name="ck_subscriptions_price_nonnegative"),
        CheckConstraint("end_date IS NULL OR end_date >= start_date", name="ck_subscriptions_period"),
        Index("ix_subscriptions_user_service_start", "user_id", "service_name", "start_date"),
        Index("ix_subscriptions_start_date", "start_date"),
    )

    @classmethod
    def from_entity(cls, subscription: Subscription) -> SubscriptionRecord:
        return cls(
            id=subscription.id,
            service_name=subscription.service_name,
            price=subscription.price,
            user_id=subscription.user_id,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
        )

    def to_entity(self) -> Subscription:
        return Subscription(
            self.id,
            self.service_name,
            self.user_id,
            self.price,
            self.start_date,
            self.end_date,
        )
