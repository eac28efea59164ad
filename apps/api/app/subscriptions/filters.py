from __future__ import annotations

import uuid
from dataclasses import dataclass
from datetime import date


DEFAULT_PAGE_SIZE = 20


@dataclass(slots=True, frozen=True)
class SubscriptionFilter:
    """Criteria for listing subscriptions. Set fields are combined with AND.

    ``start_date`` keeps subscriptions starting on or after the bound.
    ``end_date`` keeps subscriptions ending on or before the bound and every
    open-ended subscription.
    """

    user_id: uuid.UUID | None = None
    service_name: str | None = None
    start_date: date | None = None
    end_date: date | None = None
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self) -> None:
        if self.page < 1:
            raise ValueError("page must be >= 1")
        if self.page_size < 1:
            raise ValueError("page_size must be >= 1")

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.page_size

    @property
    def limit(self) -> int:
        return self.page_size


@dataclass(slots=True, frozen=True)
class TotalCostFilter:
    """Criteria for summing prices of subscriptions that start within a period."""

    user_id: uuid.UUID
    service_name: str
    period_start: date
    period_end: date


@dataclass(slots=True, frozen=True)
class CreateSubscriptionCommand:
    service_name: str
    price: int
    user_id: uuid.UUID
    start_date: date
    end_date: date | None = None


@dataclass(slots=True, frozen=True)
class UpdateSubscriptionCommand:
    service_name: str
    price: int
    start_date: date
    end_date: date | None = None
