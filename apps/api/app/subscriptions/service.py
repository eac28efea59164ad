from __future__ import annotations

import logging
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from opentelemetry.trace import Status, StatusCode

from app.metrics import observe_subscription_operation
from app.otel import get_tracer, set_span_fields
from app.subscriptions.entity import Subscription
from app.subscriptions.errors import InvariantViolationError, NotFoundError
from app.subscriptions.filters import (
    CreateSubscriptionCommand,
    SubscriptionFilter,
    TotalCostFilter,
    UpdateSubscriptionCommand,
)
from app.subscriptions.repository import SubscriptionRepository


logger = logging.getLogger("app.subscriptions")
tracer = get_tracer("app.subscriptions")


@contextmanager
def _operation(name: str, **fields: Any) -> Iterator[None]:
    with tracer.start_as_current_span(f"subscription.{name}") as span:
        set_span_fields(span, "subscription", fields)
        try:
            yield
        except NotFoundError as exc:
            observe_subscription_operation(name, "not_found")
            logger.info("subscription.not_found", extra={"operation": name, "error": str(exc), **fields})
            raise
        except InvariantViolationError as exc:
            observe_subscription_operation(name, "invalid")
            logger.warning("subscription.invalid", extra={"operation": name, "error": str(exc), **fields})
            raise
        except Exception as exc:
            observe_subscription_operation(name, "error")
            span.set_status(Status(StatusCode.ERROR, str(exc)))
            logger.error("subscription.failed", extra={"operation": name, "error": str(exc), **fields})
            raise
        observe_subscription_operation(name, "ok")


@dataclass(slots=True)
class SubscriptionService:
    repository: SubscriptionRepository

    def get_subscription(self, subscription_id: uuid.UUID) -> Subscription:
        with _operation("get", subscription_id=subscription_id):
            return self.repository.get(subscription_id)

    def list_subscriptions(self, filters: SubscriptionFilter) -> list[Subscription]:
        with _operation("list", user_id=filters.user_id, service_name=filters.service_name):
            subscriptions = self.repository.list(filters)
        logger.info("subscription.listed", extra={"operation": "list", "count": len(subscriptions)})
        return subscriptions

    def create_subscription(self, command: CreateSubscriptionCommand) -> uuid.UUID:
        with _operation("create", user_id=command.user_id, service_name=command.service_name):
            subscription = Subscription.create(
                command.service_name,
                command.user_id,
                command.price,
                command.start_date,
                command.end_date,
            )
            self.repository.add(subscription)
        logger.info("subscription.created", extra={"operation": "create", "subscription_id": str(subscription.id)})
        return subscription.id

    def update_subscription(self, subscription_id: uuid.UUID, command: UpdateSubscriptionCommand) -> None:
        with _operation("update", subscription_id=subscription_id):
            subscription = self.repository.get(subscription_id)
            subscription.set_service_name(command.service_name)
            subscription.set_price(command.price)
            # A rejected period aborts before anything reaches storage.
            subscription.set_start_end_date(command.start_date, command.end_date)
            self.repository.update(subscription)
        logger.info("subscription.updated", extra={"operation": "update", "subscription_id": str(subscription_id)})

    def delete_subscription(self, subscription_id: uuid.UUID) -> None:
        with _operation("delete", subscription_id=subscription_id):
            try:
                self.repository.delete(subscription_id)
            except NotFoundError:
                logger.info(
                    "subscription.delete_missing",
                    extra={"operation": "delete", "subscription_id": str(subscription_id)},
                )
                return
        logger.info("subscription.deleted", extra={"operation": "delete", "subscription_id": str(subscription_id)})

    def calculate_total_cost(self, filters: TotalCostFilter) -> int:
        with _operation("total_cost", user_id=filters.user_id, service_name=filters.service_name):
            total = self.repository.calculate_total_cost(filters)
        logger.info(
            "subscription.total_cost",
            extra={"operation": "total_cost", "service_name": filters.service_name, "total_cost": total},
        )
        return total
