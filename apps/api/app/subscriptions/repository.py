from __future__ import annotations

import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any, Protocol

from sqlalchemy import ColumnElement, delete, func, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.subscriptions.entity import Subscription
from app.subscriptions.errors import InvariantViolationError, NotFoundError, RepositoryError
from app.subscriptions.filters import SubscriptionFilter, TotalCostFilter
from app.subscriptions.models import SubscriptionRecord


class SubscriptionRepository(Protocol):
    """Storage contract consumed by the subscription service."""

    def get(self, subscription_id: uuid.UUID) -> Subscription:
        ...

    def list(self, filters: SubscriptionFilter) -> list[Subscription]:
        ...

    def add(self, subscription: Subscription) -> None:
        ...

    def update(self, subscription: Subscription) -> None:
        ...

    def delete(self, subscription_id: uuid.UUID) -> None:
        ...

    def calculate_total_cost(self, filters: TotalCostFilter) -> int:
        ...


def list_conditions(filters: SubscriptionFilter) -> list[ColumnElement[bool]]:
    conditions: list[ColumnElement[bool]] = []
    if filters.user_id is not None:
        conditions.append(SubscriptionRecord.user_id == filters.user_id)
    if filters.service_name is not None:
        conditions.append(SubscriptionRecord.service_name == filters.service_name)
    if filters.start_date is not None:
        conditions.append(SubscriptionRecord.start_date >= filters.start_date)
    if filters.end_date is not None:
        conditions.append(
            or_(SubscriptionRecord.end_date.is_(None), SubscriptionRecord.end_date <= filters.end_date)
        )
    return conditions


def total_cost_conditions(filters: TotalCostFilter) -> list[ColumnElement[bool]]:
    # End date is deliberately ignored: only the start month decides membership.
    return [
        SubscriptionRecord.user_id == filters.user_id,
        SubscriptionRecord.service_name == filters.service_name,
        SubscriptionRecord.start_date.between(filters.period_start, filters.period_end),
    ]


class SqlAlchemySubscriptionRepository:
    def __init__(self, session: Session) -> None:
        self.session = session

    @contextmanager
    def _storage(self, operation: str) -> Iterator[None]:
        try:
            yield
        except SQLAlchemyError as exc:
            self.session.rollback()
            raise RepositoryError(f"{operation} failed: {exc}") from exc

    def get(self, subscription_id: uuid.UUID) -> Subscription:
        with self._storage("get"):
            record = self.session.get(SubscriptionRecord, subscription_id)
        if record is None:
            raise NotFoundError(subscription_id)
        return self._to_entity(record)

    def list(self, filters: SubscriptionFilter) -> list[Subscription]:
        stmt = select(SubscriptionRecord).where(*list_conditions(filters)).offset(filters.offset).limit(filters.limit)
        with self._storage("list"):
            records = self.session.scalars(stmt).all()
        return [self._to_entity(record) for record in records]

    def add(self, subscription: Subscription) -> None:
        with self._storage("add"):
            self.session.add(SubscriptionRecord.from_entity(subscription))
            self.session.commit()

    def update(self, subscription: Subscription) -> None:
        with self._storage("update"):
            self.session.merge(SubscriptionRecord.from_entity(subscription))
            self.session.commit()

    def delete(self, subscription_id: uuid.UUID) -> None:
        with self._storage("delete"):
            result = self.session.execute(delete(SubscriptionRecord).where(SubscriptionRecord.id == subscription_id))
            deleted = result.rowcount
            self.session.commit()
        if not deleted:
            raise NotFoundError(subscription_id)

    def calculate_total_cost(self, filters: TotalCostFilter) -> int:
        stmt = select(func.coalesce(func.sum(SubscriptionRecord.price), 0)).where(*total_cost_conditions(filters))
        with self._storage("calculate_total_cost"):
            total: Any = self.session.scalar(stmt)
        return int(total or 0)

    @staticmethod
    def _to_entity(record: SubscriptionRecord) -> Subscription:
        try:
            return record.to_entity()
        except InvariantViolationError as exc:
            raise RepositoryError(f"stored subscription {record.id} is invalid: {exc}") from exc
