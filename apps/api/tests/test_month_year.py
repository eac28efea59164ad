from __future__ import annotations

from datetime import date

import pytest
from pydantic import BaseModel, ValidationError

from app.subscriptions.month_year import MonthYear, OptionalMonthYear, format_month_year, parse_month_year


class _Payload(BaseModel):
    start: MonthYear
    end: OptionalMonthYear = None


@pytest.mark.parametrize(
    ("raw", "expected"),
    [
        ("08-2025", date(2025, 8, 1)),
        ("12-1999", date(1999, 12, 1)),
        (" 01-2024 ", date(2024, 1, 1)),
        (date(2025, 8, 17), date(2025, 8, 1)),
        ("", None),
        ("null", None),
        (None, None),
    ],
)
def test_parse_month_year_accepts_supported_values(raw: object, expected: date | None) -> None:
    assert parse_month_year(raw) == expected


@pytest.mark.parametrize("raw", ["2025-08-01", "8-2025", "13-2025", "00-2025", "08/2025", "aug-2025"])
def test_parse_month_year_rejects_malformed_values(raw: str) -> None:
    with pytest.raises(ValueError):
        parse_month_year(raw)


def test_format_month_year() -> None:
    assert format_month_year(date(2025, 8, 1)) == "08-2025"
    assert format_month_year(date(2025, 8, 31)) == "08-2025"
    assert format_month_year(None) is None


def test_month_year_fields_in_models() -> None:
    payload = _Payload.model_validate({"start": "08-2025", "end": "null"})
    assert payload.start == date(2025, 8, 1)
    assert payload.end is None
    assert payload.model_dump(mode="json") == {"start": "08-2025", "end": None}

    with_end = _Payload.model_validate({"start": "08-2025", "end": "10-2025"})
    assert with_end.model_dump(mode="json") == {"start": "08-2025", "end": "10-2025"}


def test_required_month_year_rejects_missing_and_null() -> None:
    with pytest.raises(ValidationError):
        _Payload.model_validate({"start": "null"})
    with pytest.raises(ValidationError):
        _Payload.model_validate({})
    with pytest.raises(ValidationError):
        _Payload.model_validate({"start": "2025-08"})
