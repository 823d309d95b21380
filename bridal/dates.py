import re
from datetime import date, datetime, timedelta, tzinfo
from typing import Iterator, Optional, Union
from zoneinfo import ZoneInfo

from dateutil import parser as date_parser

from . import config

DateLike = Union[date, datetime, str]

# isoparse also accepts reduced forms such as "2024" or "2024-06"
_ISO_DAY = re.compile(r"\d{4}-\d{2}-\d{2}($|[T ])")

_FILL_A = datetime(1, 1, 1)
_FILL_B = datetime(2, 2, 2)


class InvalidDateError(ValueError):
    """Raised when a value cannot be read as a calendar date."""


def store_timezone() -> tzinfo:
    return ZoneInfo(config.STORE_TIMEZONE)


def _parse(value: str) -> datetime:
    text = value.strip()
    if not text:
        raise InvalidDateError("Empty date string")
    if _ISO_DAY.match(text):
        try:
            return date_parser.isoparse(text)
        except ValueError:
            pass
    try:
        first = date_parser.parse(text, default=_FILL_A)
        second = date_parser.parse(text, default=_FILL_B)
    except (ValueError, OverflowError) as e:
        raise InvalidDateError(f"Unparseable date: {value!r}") from e
    # Fragments like "12" or "June" take their missing parts from the default
    if first.date() != second.date():
        raise InvalidDateError(f"Incomplete date: {value!r}")
    return first


def normalize(value: DateLike, tz: Optional[tzinfo] = None) -> date:
    """Collapse a date, datetime or date string to its calendar day.

    Offset-aware timestamps are first converted to ``tz`` (the store timezone
    by default), so two instants of the same logical day always give the same
    key. Naive timestamps keep the day they were written with.
    """
    if isinstance(value, str):
        value = _parse(value)
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(tz or store_timezone())
        return value.date()
    if isinstance(value, date):
        return value
    raise InvalidDateError(f"Unsupported date value: {value!r}")


def today(tz: Optional[tzinfo] = None) -> date:
    return datetime.now(tz or store_timezone()).date()


def iter_days(start: date, end: date) -> Iterator[date]:
    """Yield every day from start through end, both inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_between(start: DateLike, end: DateLike) -> int:
    return (normalize(end) - normalize(start)).days


def format_day(day: date) -> str:
    # e.g. "June 11, 2024"
    return f"{day.strftime('%B')} {day.day}, {day.year}"
