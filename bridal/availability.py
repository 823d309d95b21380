from dataclasses import dataclass
from datetime import date
from typing import Dict, Iterable, List, NamedTuple, Optional

from .config import ITEM_RENTAL
from .dates import DateLike, InvalidDateError, format_day, iter_days, normalize, today as current_day
from .models import Booking


class UnavailableRange(NamedTuple):
    dress_id: str
    start_date: date  # inclusive
    end_date: date  # inclusive


# dress id -> ranges in the order the bookings listed them
AvailabilityIndex = Dict[str, List[UnavailableRange]]


class InvalidRangeError(ValueError):
    """Raised when a proposed rental period is not a forward range."""


@dataclass(frozen=True)
class Conflict:
    """First day of a proposed range that is already booked."""

    day: date

    @property
    def message(self) -> str:
        return f"The dress is unavailable on {format_day(self.day)}. Please choose different dates."


def build_index(bookings: Iterable[Booking]) -> AvailabilityIndex:
    """Collect the unavailable ranges of every dress from confirmed bookings.

    Only rental items naming a dress and both dates count. Items that cannot be
    read are skipped: availability is advisory and one bad row must not hide
    the rest of the calendar.
    """
    index: AvailabilityIndex = {}
    skipped = 0
    for booking in bookings:
        for item in booking.items:
            if item.type != ITEM_RENTAL or not item.dress_id or not item.start_date or not item.end_date:
                continue
            try:
                start = normalize(item.start_date)
                end = normalize(item.end_date)
            except InvalidDateError as e:
                print(f"[AVAILABILITY] Skipping item of booking {booking.id}: {e}")
                skipped += 1
                continue
            if end < start:
                print(f"[AVAILABILITY] Skipping item of booking {booking.id}: ends {end} before it starts {start}")
                skipped += 1
                continue
            index.setdefault(item.dress_id, []).append(UnavailableRange(item.dress_id, start, end))
    print(f"[AVAILABILITY] Indexed {len(index)} dresses ({skipped} items skipped)")
    return index


def is_booked(index: AvailabilityIndex, dress_id: str, candidate: DateLike) -> bool:
    day = normalize(candidate)
    ranges = index.get(dress_id)
    if not ranges:
        return False
    return any(r.start_date <= day <= r.end_date for r in ranges)


def is_dress_available(index: AvailabilityIndex, dress_id: str, candidate: DateLike) -> bool:
    return not is_booked(index, dress_id, candidate)


def is_day_disabled(
    index: AvailabilityIndex,
    dress_id: str,
    candidate: DateLike,
    today: Optional[date] = None,
) -> bool:
    """Day-picker rule: past days are never selectable, then the index decides."""
    day = normalize(candidate)
    if day < (today or current_day()):
        return True
    return is_booked(index, dress_id, day)


def check_range_order(start: DateLike, end: DateLike) -> None:
    if normalize(start) >= normalize(end):
        raise InvalidRangeError("End date must be after start date")


def validate_range(
    index: AvailabilityIndex,
    dress_id: str,
    start: DateLike,
    end: DateLike,
) -> Optional[Conflict]:
    """Walk the proposed period day by day; return the earliest booked day.

    Returns None when every day from start through end is free. The caller is
    expected to have run check_range_order first.
    """
    for day in iter_days(normalize(start), normalize(end)):
        if is_booked(index, dress_id, day):
            return Conflict(day)
    return None
