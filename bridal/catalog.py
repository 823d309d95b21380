import calendar
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional, Tuple

from .availability import AvailabilityIndex, is_booked
from .models import Dress

DEFAULT_PRICE_RANGE: Tuple[float, float] = (0, 10000)


@dataclass
class ListingFilters:
    category: Optional[str] = None
    color: Optional[str] = None
    sizes: List[str] = field(default_factory=list)
    min_price: float = DEFAULT_PRICE_RANGE[0]
    max_price: float = DEFAULT_PRICE_RANGE[1]
    type: str = "all"  # all | rental | purchase
    search: str = ""
    start_date: Optional[date] = None

    @property
    def has_active_filters(self) -> bool:
        return bool(
            self.category is not None
            or self.color is not None
            or self.sizes
            or self.type != "all"
            or self.start_date is not None
        )

    def clear(self) -> None:
        self.category = None
        self.color = None
        self.sizes = []
        self.min_price, self.max_price = DEFAULT_PRICE_RANGE
        self.type = "all"
        self.search = ""
        self.start_date = None


def _matches(dress: Dress, filters: ListingFilters, index: AvailabilityIndex) -> bool:
    if filters.category and filters.category not in [c.id for c in dress.categories]:
        return False
    if filters.search:
        needle = filters.search.lower()
        if needle not in dress.name.lower() and needle not in (dress.description or "").lower():
            return False
    if filters.color and filters.color not in dress.colors:
        return False
    if filters.sizes and not any(size in filters.sizes for size in dress.sizes):
        return False
    price = dress.listing_price()
    if price < filters.min_price or price > filters.max_price:
        return False
    if filters.type == "purchase" and not dress.is_for_sale:
        return False
    if filters.type == "rental" and dress.is_for_sale:
        return False
    if filters.start_date is not None and is_booked(index, dress.id, filters.start_date):
        return False
    return True


def filter_dresses(dresses: List[Dress], filters: ListingFilters, index: AvailabilityIndex) -> List[Dress]:
    """Apply the listing filters; a start date hides dresses booked on that day."""
    return [dress for dress in dresses if _matches(dress, filters, index)]


def parse_month(value: str) -> Tuple[int, int]:
    """Parse 'YYYY-MM' into (year, month)."""
    try:
        year_part, month_part = value.split("-")
        year, month = int(year_part), int(month_part)
    except ValueError as e:
        raise ValueError("Month must be YYYY-MM") from e
    if not 1 <= month <= 12:
        raise ValueError("Month must be YYYY-MM")
    return year, month


def month_days(year: int, month: int) -> List[date]:
    last_day = calendar.monthrange(year, month)[1]
    return [date(year, month, day) for day in range(1, last_day + 1)]
