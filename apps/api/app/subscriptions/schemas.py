from __future__ import annotations

from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.subscriptions.entity import Subscription
from app.subscriptions.filters import CreateSubscriptionCommand, UpdateSubscriptionCommand
from app.subscriptions.month_year import MonthYear, OptionalMonthYear


class SubscriptionCreate(BaseModel):
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "service_name": "Netflix",
                "price": 999,
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "start_date": "08-2025",
                "end_date": "09-2025",
            }
        }
    )

    service_name: str = Field(min_length=1)
    price: int = Field(ge=0)
    user_id: UUID
    start_date: MonthYear
    end_date: OptionalMonthYear = None

    def to_command(self) -> CreateSubscriptionCommand:
        return CreateSubscriptionCommand(
            service_name=self.service_name,
            price=self.price,
            user_id=self.user_id,
            start_date=self.start_date,
            end_date=self.end_date,
        )


class SubscriptionUpdate(BaseModel):
    service_name: str = Field(min_length=1)
    price: int = Field(ge=0)
    start_date: MonthYear
    end_date: OptionalMonthYear = None

    def to_command(self) -> UpdateSubscriptionCommand:
        return UpdateSubscriptionCommand(
            service_name=self.service_name,
            price=self.price,
            start_date=self.start_date,
            end_date=self.end_date,
        )


class SubscriptionRead(BaseModel):
    id: UUID
    service_name: str
    price: int
    user_id: UUID
    start_date: MonthYear
    end_date: OptionalMonthYear = None

    @classmethod
    def from_entity(cls, subscription: Subscription) -> SubscriptionRead:
        return cls(
            id=subscription.id,
            service_name=subscription.service_name,
            price=subscription.price,
            user_id=subscription.user_id,
            start_date=subscription.start_date,
            end_date=subscription.end_date,
        )


class IDResponse(BaseModel):
    id: UUID


class IntResponse(BaseModel):
    value: int
