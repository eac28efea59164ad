"""Calendar-month values on the wire, written as ``MM-YYYY`` (e.g. ``08-2025``)."""

from __future__ import annotations

import re
from datetime import date
from typing import Annotated, Any

from pydantic import BeforeValidator, PlainSerializer


_MONTH_YEAR_RE = re.compile(r"^(?P<month>\d{2})-(?P<year>\d{4})$")
_EMPTY_VALUES = {"", "null"}


def first_of_month(value: date) -> date:
    return value.replace(day=1)


def parse_month_year(value: Any) -> date | None:
    """Parse ``MM-YYYY`` into the first day of that month.

    ``None``, an empty string and the literal ``"null"`` mean "no value".
    """
    if value is None:
        return None
    if isinstance(value, date):
        return first_of_month(value)
    if not isinstance(value, str):
        raise ValueError("month-year must be a string in MM-YYYY format")

    raw = value.strip().strip('"')
    if raw in _EMPTY_VALUES:
        return None

    match = _MONTH_YEAR_RE.match(raw)
    if match is None:
        raise ValueError(f"invalid month-year '{raw}', expected MM-YYYY")

    month = int(match.group("month"))
    year = int(match.group("year"))
    if not 1 <= month <= 12:
        raise ValueError(f"invalid month-year '{raw}', month must be between 01 and 12")
    if year < 1:
        raise ValueError(f"invalid month-year '{raw}', year must be positive")
    return date(year, month, 1)


def format_month_year(value: date | None) -> str | None:
    if value is None:
        return None
    return f"{value.month:02d}-{value.year:04d}"


MonthYear = Annotated[
    date,
    BeforeValidator(parse_month_year),
    PlainSerializer(format_month_year, return_type=str),
]

OptionalMonthYear = Annotated[
    date | None,
    BeforeValidator(parse_month_year),
    PlainSerializer(format_month_year, return_type=str | None),
]
