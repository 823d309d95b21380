from datetime import date
from typing import List, Literal, Optional

from pydantic import BaseModel, Field, field_validator

from .config import TUNISIAN_STATES

ItemType = Literal["rental", "purchase"]
DayStatus = Literal["past", "booked", "free", "unknown"]


class BookingItem(BaseModel):
    # Everything is optional: malformed rows are skipped by the index builder
    key: Optional[str] = None
    dress_id: Optional[str] = None
    dress_name: Optional[str] = None
    start_date: Optional[str] = None
    end_date: Optional[str] = None
    type: Optional[str] = None
    color: Optional[str] = None
    size: Optional[str] = None
    quantity: int = 0
    price_per_day: Optional[float] = None
    buy_price: Optional[float] = None


class Booking(BaseModel):
    id: str
    status: str
    items: List[BookingItem] = Field(default_factory=list)


class Category(BaseModel):
    id: str
    name: str


class Dress(BaseModel):
    id: str
    name: str
    description: str = ""
    new_collection: bool = False
    price_per_day: float = 0
    is_rent_on_discount: bool = False
    new_price_per_day: Optional[float] = None
    is_for_sale: bool = False
    buy_price: Optional[float] = None
    is_sell_on_discount: bool = False
    new_buy_price: Optional[float] = None
    colors: List[str] = Field(default_factory=list)
    sizes: List[str] = Field(default_factory=list)
    categories: List[Category] = Field(default_factory=list)

    def effective_price_per_day(self) -> float:
        if self.is_rent_on_discount and self.new_price_per_day:
            return self.new_price_per_day
        return self.price_per_day

    def effective_buy_price(self) -> Optional[float]:
        if self.is_sell_on_discount and self.new_buy_price:
            return self.new_buy_price
        return self.buy_price

    def listing_price(self) -> float:
        """Price used by the listing price-range filter."""
        if self.is_for_sale:
            return self.buy_price or 0
        return self.price_per_day or 0


class CartItemRequest(BaseModel):
    dress_id: str
    type: ItemType = "rental"
    color: str = ""
    size: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class CartItem(BaseModel):
    dress_id: str
    type: ItemType
    quantity: int
    color: str
    size: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    price_per_day: Optional[float] = None
    buy_price: Optional[float] = None

    def line_total(self) -> float:
        if self.type == "rental":
            return (self.price_per_day or 0) * self.quantity
        return (self.buy_price or 0) * self.quantity


class CheckoutForm(BaseModel):
    full_name: str = Field(..., min_length=2)
    phone: str = Field(..., min_length=8)
    address: str = Field(..., min_length=5)
    postal_code: str = Field(..., min_length=4)
    state: str = Field(..., min_length=2)
    note: Optional[str] = None
    try_on_date: date

    @field_validator("state")
    @classmethod
    def _known_state(cls, value: str) -> str:
        if value not in TUNISIAN_STATES:
            raise ValueError(f"Unknown governorate: {value}")
        return value


class CheckoutRequest(BaseModel):
    form: CheckoutForm
    items: List[CartItem]


class CheckoutResult(BaseModel):
    booking_id: str
    status: str
    total: float


class DressListing(BaseModel):
    dresses: List[Dress]
    stale: bool = False


class CalendarDay(BaseModel):
    day: date
    status: DayStatus


class DressCalendar(BaseModel):
    dress_id: str
    month: str
    stale: bool = False
    days: List[CalendarDay]


class RangeCheckResult(BaseModel):
    dress_id: str
    start: date
    end: date
    available: bool
    conflict_date: Optional[date] = None
    message: Optional[str] = None
    stale: bool = False
