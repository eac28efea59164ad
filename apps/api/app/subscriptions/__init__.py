from app.subscriptions.api import router
from app.subscriptions.entity import Subscription
from app.subscriptions.errors import (
    InvalidPeriodError,
    InvariantViolationError,
    NotFoundError,
    RepositoryError,
    SubscriptionError,
)
from app.subscriptions.filters import (
    CreateSubscriptionCommand,
    SubscriptionFilter,
    TotalCostFilter,
    UpdateSubscriptionCommand,
)
from app.subscriptions.models import SubscriptionRecord
from app.subscriptions.repository import SqlAlchemySubscriptionRepository, SubscriptionRepository
from app.subscriptions.service import SubscriptionService

__all__ = [
    "router",
    "Subscription",
    "SubscriptionRecord",
    "SubscriptionError",
    "InvariantViolationError",
    "InvalidPeriodError",
    "NotFoundError",
    "RepositoryError",
    "SubscriptionFilter",
    "TotalCostFilter",
    "CreateSubscriptionCommand",
    "UpdateSubscriptionCommand",
    "SubscriptionRepository",
    "SqlAlchemySubscriptionRepository",
    "SubscriptionService",
]
