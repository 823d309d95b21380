from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Dict, List, Optional, Protocol

from .availability import AvailabilityIndex, build_index
from .models import Booking, Category, Dress


class FetchFailure(Exception):
    """The booking store could not be read."""


class BookingStore(Protocol):
    def fetch_confirmed_bookings(self) -> List[Booking]: ...

    def fetch_dresses(self) -> List[Dress]: ...

    def fetch_dress(self, dress_id: str) -> Optional[Dress]: ...

    def fetch_categories(self) -> List[Category]: ...

    def create_booking(self, document: Dict) -> str: ...


@dataclass(frozen=True)
class AvailabilitySnapshot:
    index: AvailabilityIndex
    fetched_at: datetime
    stale: bool = False
    error: Optional[str] = None
    booking_count: int = 0

    @classmethod
    def empty(cls, error: Optional[str] = None) -> "AvailabilitySnapshot":
        return cls(index={}, fetched_at=datetime.now(timezone.utc), stale=error is not None, error=error)


class AvailabilityService:
    """Turns booking fetches into an index and degrades store failures.

    Browsing callers use ``load()``, which marks the snapshot stale instead of
    raising. Booking commits use ``load_strict()``, which lets ``FetchFailure``
    through so nothing is written against an index that may be missing bookings.
    """

    def __init__(self, store: BookingStore):
        self.store = store

    def load_strict(self) -> AvailabilitySnapshot:
        bookings = self.store.fetch_confirmed_bookings()
        return AvailabilitySnapshot(
            index=build_index(bookings),
            fetched_at=datetime.now(timezone.utc),
            booking_count=len(bookings),
        )

    def load(self) -> AvailabilitySnapshot:
        """Best-effort index; an unreadable store yields an empty, stale one."""
        try:
            return self.load_strict()
        except FetchFailure as e:
            print(f"[AVAILABILITY] Booking fetch failed, treating as no bookings known: {e}")
            return AvailabilitySnapshot.empty(error=str(e))
