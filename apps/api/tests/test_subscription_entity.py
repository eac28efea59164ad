from __future__ import annotations

import uuid
from datetime import date

import pytest

from app.subscriptions.entity import Subscription
from app.subscriptions.errors import InvalidPeriodError, InvariantViolationError


USER_ID = uuid.UUID("123e4567-e89b-12d3-a456-426614174000")


def _subscription(start: date = date(2025, 8, 1), end: date | None = date(2025, 10, 1)) -> Subscription:
    return Subscription.create("Netflix", USER_ID, 999, start, end)


def _snapshot(subscription: Subscription) -> tuple[object, ...]:
    return (
        subscription.id,
        subscription.service_name,
        subscription.price,
        subscription.user_id,
        subscription.start_date,
        subscription.end_date,
    )


def test_create_generates_identifier_and_keeps_fields() -> None:
    first = _subscription()
    second = _subscription()

    assert first.id != second.id
    assert first.service_name == "Netflix"
    assert first.price == 999
    assert first.user_id == USER_ID
    assert first.start_date == date(2025, 8, 1)
    assert first.end_date == date(2025, 10, 1)


def test_create_with_identifier_uses_given_id() -> None:
    subscription_id = uuid.uuid4()
    subscription = Subscription(subscription_id, "Spotify", USER_ID, 299, date(2025, 1, 1), None)

    assert subscription.id == subscription_id
    assert subscription.end_date is None


@pytest.mark.parametrize(
    ("start", "end"),
    [
        (date(2025, 8, 1), None),
        (date(2025, 8, 1), date(2025, 8, 1)),
        (date(2025, 8, 1), date(2026, 1, 1)),
        (date(2025, 8, 20), date(2025, 8, 3)),
    ],
)
def test_valid_periods_are_accepted(start: date, end: date | None) -> None:
    subscription = _subscription(start, end)
    assert subscription.start_date == start.replace(day=1)
    assert subscription.end_date == (end.replace(day=1) if end else None)


def test_end_before_start_fails_on_create() -> None:
    with pytest.raises(InvalidPeriodError) as exc_info:
        _subscription(date(2025, 9, 1), date(2025, 8, 1))

    assert isinstance(exc_info.value, InvariantViolationError)
    assert exc_info.value.start_date == date(2025, 9, 1)
    assert exc_info.value.end_date == date(2025, 8, 1)


def test_end_before_start_fails_with_identifier() -> None:
    with pytest.raises(InvalidPeriodError):
        Subscription(uuid.uuid4(), "Netflix", USER_ID, 999, date(2025, 9, 1), date(2025, 8, 1))


def test_set_start_date_after_end_leaves_state_unchanged() -> None:
    subscription = _subscription()
    before = _snapshot(subscription)

    with pytest.raises(InvalidPeriodError):
        subscription.set_start_date(date(2025, 11, 1))

    assert _snapshot(subscription) == before


def test_set_end_date_before_start_leaves_state_unchanged() -> None:
    subscription = _subscription()
    before = _snapshot(subscription)

    with pytest.raises(InvalidPeriodError):
        subscription.set_end_date(date(2025, 7, 1))

    assert _snapshot(subscription) == before


def test_set_start_end_date_validates_pair_atomically() -> None:
    subscription = _subscription()
    before = _snapshot(subscription)

    with pytest.raises(InvalidPeriodError):
        subscription.set_start_end_date(date(2025, 9, 1), date(2025, 8, 1))
    assert _snapshot(subscription) == before

    # Moving both dates past the current end only works as a pair.
    subscription.set_start_end_date(date(2026, 1, 1), date(2026, 3, 1))
    assert subscription.start_date == date(2026, 1, 1)
    assert subscription.end_date == date(2026, 3, 1)


def test_date_setters_accept_valid_values() -> None:
    subscription = _subscription()

    subscription.set_end_date(None)
    assert subscription.end_date is None

    subscription.set_start_date(date(2030, 5, 1))
    assert subscription.start_date == date(2030, 5, 1)

    subscription.set_end_date(date(2030, 5, 1))
    assert subscription.end_date == date(2030, 5, 1)


def test_name_and_price_setters_are_unconditional() -> None:
    subscription = _subscription()

    subscription.set_service_name("")
    subscription.set_price(0)

    assert subscription.service_name == ""
    assert subscription.price == 0


def test_fields_are_read_only() -> None:
    subscription = _subscription()

    with pytest.raises(AttributeError):
        subscription.price = 1  # type: ignore[misc]
