from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

from .availability import Conflict, check_range_order, is_booked, is_day_disabled, validate_range
from .catalog import ListingFilters, filter_dresses, month_days
from .dates import DateLike, normalize, today as current_day
from .models import CalendarDay, DayStatus, Dress
from .service import AvailabilityService, AvailabilitySnapshot


@dataclass
class StorefrontSession:
    """Per-page context, created on page load and dropped on navigation.

    Holds the listing filters, the selected rental dates and the availability
    snapshot of one page; nothing in it is shared between requests.
    """

    filters: ListingFilters = field(default_factory=ListingFilters)
    selected_start: Optional[date] = None
    selected_end: Optional[date] = None
    today: date = field(default_factory=current_day)
    snapshot: Optional[AvailabilitySnapshot] = None
    _load_token: int = field(default=0, init=False)

    @property
    def is_loading(self) -> bool:
        return self.snapshot is None

    @property
    def stale(self) -> bool:
        return self.snapshot is not None and self.snapshot.stale

    def begin_load(self) -> int:
        """Start a new fetch; any result of an earlier fetch will be ignored."""
        self._load_token += 1
        self.snapshot = None
        return self._load_token

    def finish_load(self, token: int, snapshot: AvailabilitySnapshot) -> bool:
        if token != self._load_token:
            print(f"[SESSION] Discarding superseded availability load {token}")
            return False
        self.snapshot = snapshot
        return True

    def load(self, service: AvailabilityService) -> AvailabilitySnapshot:
        token = self.begin_load()
        snapshot = service.load()
        self.finish_load(token, snapshot)
        return snapshot

    def day_status(self, dress_id: str, candidate: DateLike) -> DayStatus:
        day = normalize(candidate)
        if day < self.today:
            return "past"
        if self.snapshot is None:
            return "unknown"
        if is_booked(self.snapshot.index, dress_id, day):
            return "booked"
        return "free"

    def is_day_disabled(self, dress_id: str, candidate: DateLike) -> Optional[bool]:
        """None while availability is still loading."""
        if self.snapshot is None:
            return True if normalize(candidate) < self.today else None
        return is_day_disabled(self.snapshot.index, dress_id, candidate, today=self.today)

    def select_dates(self, start: DateLike, end: DateLike) -> None:
        check_range_order(start, end)
        self.selected_start = normalize(start)
        self.selected_end = normalize(end)

    def check_selection(self, dress_id: str) -> Optional[Conflict]:
        """Validate the selected dates against the loaded index."""
        if self.selected_start is None or self.selected_end is None:
            raise ValueError("No rental dates selected")
        if self.snapshot is None:
            raise RuntimeError("Availability is still loading")
        return validate_range(self.snapshot.index, dress_id, self.selected_start, self.selected_end)

    def visible_dresses(self, dresses: List[Dress]) -> List[Dress]:
        # Nothing is listed until availability is known
        if self.snapshot is None:
            return []
        return filter_dresses(dresses, self.filters, self.snapshot.index)

    def month_calendar(self, dress_id: str, year: int, month: int) -> List[CalendarDay]:
        return [
            CalendarDay(day=day, status=self.day_status(dress_id, day))
            for day in month_days(year, month)
        ]
