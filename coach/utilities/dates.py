"""Canonical local-date helpers.

Every date that crosses the storage boundary or keys an index goes through
``to_date_string`` so that comparisons are done on ``YYYY-MM-DD`` strings and
never on timestamps (a timestamp converted to UTC can land on the previous or
next calendar day).
"""
import calendar
from datetime import MAXYEAR, MINYEAR, date, datetime, timedelta
from typing import Tuple, Union

from coach.domain.errors import ValidationError
from coach.utilities.constants import DATE_FORMAT

DateLike = Union[date, datetime, str]


def to_date_string(value: DateLike) -> str:
    """Return the canonical ``YYYY-MM-DD`` string for a date, datetime or string.

    Datetimes keep their own local calendar day; no timezone conversion is done.
    Strings may carry a time part (``2025-03-10T23:30:00``), which is dropped.
    """
    if isinstance(value, datetime):
        return value.date().strftime(DATE_FORMAT)
    if isinstance(value, date):
        return value.strftime(DATE_FORMAT)
    if isinstance(value, str):
        return parse_date_string(value).strftime(DATE_FORMAT)
    raise ValidationError(f"Unsupported date value: {value!r}")


def parse_date_string(value: str) -> date:
    """Parse a canonical date string (an optional time part is ignored)."""
    if not isinstance(value, str) or not value.strip():
        raise ValidationError("Date is required")
    raw = value.strip()
    for sep in ("T", " "):
        if sep in raw:
            raw = raw.split(sep, 1)[0]
    try:
        return datetime.strptime(raw, DATE_FORMAT).date()
    except ValueError as e:
        raise ValidationError(f"Invalid date '{value}', expected YYYY-MM-DD") from e


def today_string() -> str:
    return date.today().strftime(DATE_FORMAT)


def check_month(year: int, month: int) -> None:
    if not isinstance(month, int) or not 1 <= month <= 12:
        raise ValidationError(f"Month must be between 1 and 12, got {month!r}")
    # grids spill into the neighbouring years
    if not isinstance(year, int) or not MINYEAR < year < MAXYEAR:
        raise ValidationError(f"Invalid year {year!r}")


def month_bounds(year: int, month: int) -> Tuple[str, str]:
    """First and last day of the month as canonical strings."""
    check_month(year, month)
    last = calendar.monthrange(year, month)[1]
    return date(year, month, 1).strftime(DATE_FORMAT), date(year, month, last).strftime(DATE_FORMAT)


def shift_month(year: int, month: int, delta: int) -> Tuple[int, int]:
    """Move ``delta`` months forward (negative = backward)."""
    check_month(year, month)
    index = year * 12 + (month - 1) + delta
    return index // 12, index % 12 + 1


def date_range(start: DateLike, end: DateLike):
    """Yield canonical strings from start to end inclusive."""
    current = parse_date_string(to_date_string(start))
    last = parse_date_string(to_date_string(end))
    while current <= last:
        yield current.strftime(DATE_FORMAT)
        current += timedelta(days=1)


__all__ = [
    'DateLike', 'to_date_string', 'parse_date_string', 'today_string',
    'check_month', 'month_bounds', 'shift_month', 'date_range'
]
