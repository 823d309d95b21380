from typing import Dict, List, Optional

import pytest

from bridal.models import Booking, BookingItem, Category, Dress
from bridal.service import FetchFailure


def rental(dress_id, start, end, **extra) -> BookingItem:
    return BookingItem(dress_id=dress_id, start_date=start, end_date=end, type="rental", **extra)


def confirmed(booking_id: str, *items: BookingItem) -> Booking:
    return Booking(id=booking_id, status="confirmed", items=list(items))


class FakeStore:
    def __init__(self, bookings=None, dresses=None, categories=None):
        self.bookings: List[Booking] = list(bookings or [])
        self.dresses: List[Dress] = list(dresses or [])
        self.categories: List[Category] = list(categories or [])
        self.created: List[Dict] = []
        self.fail_bookings = False
        self.booking_fetches = 0

    def fetch_confirmed_bookings(self) -> List[Booking]:
        self.booking_fetches += 1
        if self.fail_bookings:
            raise FetchFailure("store unreachable")
        return list(self.bookings)

    def fetch_dresses(self) -> List[Dress]:
        return list(self.dresses)

    def fetch_dress(self, dress_id: str) -> Optional[Dress]:
        return next((d for d in self.dresses if d.id == dress_id), None)

    def fetch_categories(self) -> List[Category]:
        return list(self.categories)

    def create_booking(self, document: Dict) -> str:
        self.created.append(document)
        return f"booking-{len(self.created)}"


@pytest.fixture
def evening():
    return Category(id="cat-evening", name="Evening")


@pytest.fixture
def dresses(evening):
    return [
        Dress(
            id="D1",
            name="Ivory Mermaid",
            description="Lace mermaid gown",
            price_per_day=120,
            is_rent_on_discount=True,
            new_price_per_day=90,
            colors=["Ivory", "White"],
            sizes=["S", "M"],
            categories=[evening],
        ),
        Dress(
            id="D2",
            name="Blush Ballgown",
            description="Tulle ballgown with train",
            price_per_day=150,
            colors=["Blush"],
            sizes=["M", "L"],
        ),
        Dress(
            id="D3",
            name="Satin Sheath",
            description="Minimal satin dress",
            is_for_sale=True,
            buy_price=900,
            is_sell_on_discount=True,
            new_buy_price=750,
            colors=["Champagne"],
            sizes=["S"],
        ),
    ]


@pytest.fixture
def store(dresses, evening):
    return FakeStore(
        bookings=[confirmed("b1", rental("D1", "2099-06-10T00:00:00Z", "2099-06-12T00:00:00Z"))],
        dresses=dresses,
        categories=[evening],
    )
