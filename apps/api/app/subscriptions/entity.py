from __future__ import annotations

import uuid
from datetime import date

from app.subscriptions.errors import InvalidPeriodError
from app.subscriptions.month_year import first_of_month


def validate_period(start_date: date, end_date: date | None) -> None:
    if end_date is not None and start_date > end_date:
        raise InvalidPeriodError(start_date, end_date)


class Subscription:
    """A user's paid subscription to a named service.

    Dates have calendar-month granularity and are stored as the first day of
    their month. ``end_date`` of ``None`` means the subscription is open-ended.
    Every date mutation re-checks that the end date does not precede the start
    date and leaves the entity untouched when it does.
    """

    __slots__ = ("_id", "_service_name", "_price", "_user_id", "_start_date", "_end_date")

    def __init__(
        self,
        id: uuid.UUID,
        service_name: str,
        user_id: uuid.UUID,
        price: int,
        start_date: date,
        end_date: date | None = None,
    ) -> None:
        start_date, end_date = _normalize(start_date, end_date)
        validate_period(start_date, end_date)

        self._id = id
        self._service_name = service_name
        self._price = price
        self._user_id = user_id
        self._start_date = start_date
        self._end_date = end_date

    @classmethod
    def create(
        cls,
        service_name: str,
        user_id: uuid.UUID,
        price: int,
        start_date: date,
        end_date: date | None = None,
    ) -> Subscription:
        return cls(uuid.uuid4(), service_name, user_id, price, start_date, end_date)

    @property
    def id(self) -> uuid.UUID:
        return self._id

    @property
    def service_name(self) -> str:
        return self._service_name

    @property
    def price(self) -> int:
        return self._price

    @property
    def user_id(self) -> uuid.UUID:
        return self._user_id

    @property
    def start_date(self) -> date:
        return self._start_date

    @property
    def end_date(self) -> date | None:
        return self._end_date

    def set_service_name(self, service_name: str) -> None:
        self._service_name = service_name

    def set_price(self, price: int) -> None:
        self._price = price

    def set_start_date(self, start_date: date) -> None:
        self.set_start_end_date(start_date, self._end_date)

    def set_end_date(self, end_date: date | None) -> None:
        self.set_start_end_date(self._start_date, end_date)

    def set_start_end_date(self, start_date: date, end_date: date | None) -> None:
        start_date, end_date = _normalize(start_date, end_date)
        validate_period(start_date, end_date)
        self._start_date = start_date
        self._end_date = end_date

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Subscription):
            return NotImplemented
        return (
            self._id == other._id
            and self._service_name == other._service_name
            and self._price == other._price
            and self._user_id == other._user_id
            and self._start_date == other._start_date
            and self._end_date == other._end_date
        )

    def __repr__(self) -> str:
        return f"<Subscription id={self._id} service_name={self._service_name!r} user_id={self._user_id}>"


def _normalize(start_date: date, end_date: date | None) -> tuple[date, date | None]:
    return first_of_month(start_date), first_of_month(end_date) if end_date is not None else None
