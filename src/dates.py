"""Calendar date helpers used by the schedules."""

import calendar
from datetime import date, datetime
from typing import Union

from .errors import ValidationError

DateLike = Union[date, datetime, str]


def parse_date(value: DateLike, field: str = "date") -> date:
    """Parse a date from a ``date``, ``datetime`` or ISO string.

    Accepts ``YYYY-MM-DD`` and ``YYYY-MM`` (first of the month). Raises
    ValidationError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        try:
            if len(text) == 7:
                return datetime.strptime(text, "%Y-%m").date()
            return date.fromisoformat(text[:10])
        except ValueError as e:
            raise ValidationError(f"Invalid {field}", context={field: value}) from e
    raise ValidationError(f"Invalid {field}", context={field: value})


def days_in_month(d: date) -> int:
    """Number of days in the calendar month containing ``d``."""
    return calendar.monthrange(d.year, d.month)[1]


def add_calendar_months(d: date, months: int) -> date:
    """Shift ``d`` by whole calendar months.

    The day is clamped to the last day of the target month, so Jan 31 + 1
    month is Feb 28 (or 29), never Mar 3.
    """
    total = d.year * 12 + (d.month - 1) + months
    year, month_index = divmod(total, 12)
    month = month_index + 1
    day = min(d.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def is_same_month(a: date, b: date) -> bool:
    return a.year == b.year and a.month == b.month


def months_between(start: date, end: date) -> int:
    """Calendar month difference between two dates, ignoring the day."""
    return (end.year - start.year) * 12 + (end.month - start.month)


def anchored_payment_date(start: date, n: int, day_of_month: int) -> date:
    """Date of the n-th monthly payment after ``start``.

    Payments fall on ``day_of_month``, clamped to the length of each month.
    """
    first_of_month = add_calendar_months(start.replace(day=1), n)
    day = min(day_of_month, days_in_month(first_of_month))
    return first_of_month.replace(day=day)
