import uuid
from datetime import date
from typing import Dict, List, Optional

from . import config
from .availability import (
    AvailabilityIndex,
    Conflict,
    InvalidRangeError,
    UnavailableRange,
    check_range_order,
    validate_range,
)
from .dates import days_between, normalize, today as current_day
from .models import CartItem, CartItemRequest, CheckoutForm, CheckoutRequest, CheckoutResult, Dress
from .service import AvailabilityService, BookingStore


class CheckoutError(ValueError):
    """A cart or checkout rule was not met."""


class ConflictError(Exception):
    def __init__(self, conflict: Conflict, dress_id: str):
        super().__init__(conflict.message)
        self.conflict = conflict
        self.dress_id = dress_id


def _check_rental_period(start: Optional[date], end: Optional[date], today: date) -> None:
    if start is None or end is None:
        raise CheckoutError("Please select all required options (color and dates)")
    check_range_order(start, end)
    if normalize(start) < today:
        raise InvalidRangeError("Rental cannot start in the past")


def price_item(dress: Dress, request: CartItemRequest) -> CartItem:
    """Build a cart item with quantity and current (discounted) price."""
    if request.type == config.ITEM_RENTAL:
        return CartItem(
            dress_id=dress.id,
            type="rental",
            quantity=days_between(request.start_date, request.end_date),
            color=request.color,
            size=request.size,
            start_date=normalize(request.start_date),
            end_date=normalize(request.end_date),
            price_per_day=dress.effective_price_per_day(),
        )
    return CartItem(
        dress_id=dress.id,
        type="purchase",
        quantity=1,
        color=request.color,
        size=request.size,
        buy_price=dress.effective_buy_price(),
    )


def check_item(dress: Dress, request: CartItemRequest, today: date) -> None:
    if not request.color:
        raise CheckoutError("Please select color")
    if request.type == config.ITEM_RENTAL:
        _check_rental_period(request.start_date, request.end_date, today)
    elif not dress.is_for_sale or not dress.buy_price:
        raise CheckoutError("This dress is not available for purchase")


def add_to_cart(
    dress: Dress,
    request: CartItemRequest,
    index: AvailabilityIndex,
    today: Optional[date] = None,
) -> CartItem:
    check_item(dress, request, today or current_day())
    if request.type == config.ITEM_RENTAL:
        conflict = validate_range(index, dress.id, request.start_date, request.end_date)
        if conflict is not None:
            raise ConflictError(conflict, dress.id)
    return price_item(dress, request)


def check_try_on_date(try_on_date: date, items: List[CartItem]) -> None:
    starts = [normalize(item.start_date) for item in items if item.type == config.ITEM_RENTAL and item.start_date]
    if not starts:
        return
    if normalize(try_on_date) >= min(starts):
        raise CheckoutError("Try-on date must be before the rental period starts.")


def build_booking_document(form: CheckoutForm, items: List[CartItem], dresses: Dict[str, Dress]) -> Dict:
    document_items = []
    for item in items:
        entry = {
            "key": uuid.uuid4().hex,
            "dress_id": item.dress_id,
            "dress_name": dresses[item.dress_id].name,
            "color": item.color,
            "quantity": item.quantity,
            "start_date": item.start_date.isoformat() if item.start_date else None,
            "end_date": item.end_date.isoformat() if item.end_date else None,
            "price_per_day": item.price_per_day,
            "buy_price": item.buy_price,
            "type": item.type,
        }
        if item.size:
            entry["size"] = item.size
        document_items.append(entry)
    return {
        "full_name": form.full_name,
        "phone": form.phone,
        "address": f"{form.address}, {form.postal_code}, {form.state}",
        "note": form.note,
        "try_on_date": form.try_on_date.isoformat(),
        "items": document_items,
        "total": sum(item.line_total() for item in items),
        "status": config.STATUS_PENDING,
    }


def _revalidate(items: List[CartItem], index: AvailabilityIndex) -> None:
    """Check rentals against confirmed bookings and against each other."""
    in_cart: AvailabilityIndex = {}
    for item in items:
        if item.type != config.ITEM_RENTAL:
            continue
        for current in (index, in_cart):
            conflict = validate_range(current, item.dress_id, item.start_date, item.end_date)
            if conflict is not None:
                raise ConflictError(conflict, item.dress_id)
        in_cart.setdefault(item.dress_id, []).append(UnavailableRange(item.dress_id, item.start_date, item.end_date))


def submit_order(
    store: BookingStore,
    service: AvailabilityService,
    request: CheckoutRequest,
    today: Optional[date] = None,
) -> CheckoutResult:
    """Validate the cart, re-check availability and write a pending booking.

    Every rental is checked again against a freshly fetched index, so a store
    that cannot be read blocks the order.

    Raises CheckoutError / InvalidRangeError for rule violations, ConflictError
    when a rental overlaps a confirmed booking, and FetchFailure when the store
    cannot be read or written.
    """
    if not request.items:
        raise CheckoutError("Your cart is empty")
    today = today or current_day()
    dresses = {dress.id: dress for dress in store.fetch_dresses()}

    items: List[CartItem] = []
    for item in request.items:
        dress = dresses.get(item.dress_id)
        if dress is None:
            raise CheckoutError(f"Unknown dress: {item.dress_id}")
        cart_request = CartItemRequest(
            dress_id=item.dress_id,
            type=item.type,
            color=item.color,
            size=item.size,
            start_date=item.start_date,
            end_date=item.end_date,
        )
        check_item(dress, cart_request, today)
        priced = price_item(dress, cart_request)
        if item.type == config.ITEM_PURCHASE:
            priced.quantity = max(item.quantity, 1)
        items.append(priced)

    check_try_on_date(request.form.try_on_date, items)

    snapshot = service.load_strict()
    _revalidate(items, snapshot.index)

    document = build_booking_document(request.form, items, dresses)
    booking_id = store.create_booking(document)
    print(f"[CHECKOUT] Booking {booking_id} submitted with {len(items)} items, total {document['total']}")
    return CheckoutResult(booking_id=booking_id, status=document["status"], total=document["total"])
