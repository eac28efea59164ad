from __future__ import annotations

import uuid
from datetime import date


class SubscriptionError(Exception):
    """Base error for the subscriptions domain."""


class InvariantViolationError(SubscriptionError):
    """Raised when an operation would leave a subscription in an invalid state."""


class InvalidPeriodError(InvariantViolationError):
    """Raised when an end date precedes the start date."""

    def __init__(self, start_date: date, end_date: date) -> None:
        self.start_date = start_date
        self.end_date = end_date
        super().__init__(f"invalid period: end date {end_date:%m-%Y} precedes start date {start_date:%m-%Y}")


class NotFoundError(SubscriptionError):
    """Raised by the repository when no record exists for an identifier."""

    def __init__(self, subscription_id: uuid.UUID) -> None:
        self.subscription_id = subscription_id
        super().__init__(f"subscription {subscription_id} not found")


class RepositoryError(SubscriptionError):
    """Storage failure that is not a missing record. Always chained to the cause."""
