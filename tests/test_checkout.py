from datetime import date

import pytest
from conftest import confirmed, rental

from bridal.availability import InvalidRangeError, build_index
from bridal.checkout import (
    CheckoutError,
    ConflictError,
    add_to_cart,
    check_try_on_date,
    submit_order,
)
from bridal.models import CartItem, CartItemRequest, CheckoutForm, CheckoutRequest
from bridal.service import AvailabilityService, FetchFailure

TODAY = date(2099, 6, 1)


def _form(**overrides):
    values = dict(
        full_name="Amira Ben Salah",
        phone="+216 22334455",
        address="12 Rue de Marseille",
        postal_code="1000",
        state="Tunis",
        note="Size M please",
        try_on_date=date(2099, 6, 5),
    )
    values.update(overrides)
    return CheckoutForm(**values)


def _rental_item(dress_id="D2", start=date(2099, 6, 20), end=date(2099, 6, 23), price=150):
    return CartItem(
        dress_id=dress_id,
        type="rental",
        quantity=(end - start).days,
        color="Blush",
        size="M",
        start_date=start,
        end_date=end,
        price_per_day=price,
    )


def test_rental_quantity_counts_nights(dresses):
    request = CartItemRequest(dress_id="D2", color="Blush", start_date=date(2099, 6, 20), end_date=date(2099, 6, 23))

    assert add_to_cart(dresses[1], request, build_index([]), today=TODAY).quantity == 3


def test_add_rental_uses_discounted_price(dresses):
    request = CartItemRequest(dress_id="D1", color="Ivory", start_date=date(2099, 6, 20), end_date=date(2099, 6, 24))

    item = add_to_cart(dresses[0], request, build_index([]), today=TODAY)

    assert item.type == "rental"
    assert item.quantity == 4
    assert item.price_per_day == 90
    assert item.line_total() == 360


def test_add_rental_conflict(dresses):
    index = build_index([confirmed("b1", rental("D1", "2099-06-22", "2099-06-30"))])
    request = CartItemRequest(dress_id="D1", color="Ivory", start_date=date(2099, 6, 20), end_date=date(2099, 6, 24))

    with pytest.raises(ConflictError) as exc_info:
        add_to_cart(dresses[0], request, index, today=TODAY)

    assert exc_info.value.conflict.day == date(2099, 6, 22)
    assert "June 22, 2099" in str(exc_info.value)


@pytest.mark.parametrize("request_kwargs,error", [
    (dict(color=""), CheckoutError),
    (dict(start_date=None), CheckoutError),
    (dict(end_date=date(2099, 6, 20)), InvalidRangeError),
    (dict(start_date=date(2099, 5, 20), end_date=date(2099, 6, 2)), InvalidRangeError),
])
def test_add_rental_rejects_bad_requests(dresses, request_kwargs, error):
    values = dict(dress_id="D1", color="Ivory", start_date=date(2099, 6, 20), end_date=date(2099, 6, 24))
    values.update(request_kwargs)

    with pytest.raises(error):
        add_to_cart(dresses[0], CartItemRequest(**values), build_index([]), today=TODAY)


def test_add_purchase(dresses):
    request = CartItemRequest(dress_id="D3", type="purchase", color="Champagne")

    item = add_to_cart(dresses[2], request, build_index([]), today=TODAY)

    assert item.quantity == 1
    assert item.buy_price == 750
    assert item.start_date is None


def test_add_purchase_requires_dress_for_sale(dresses):
    request = CartItemRequest(dress_id="D2", type="purchase", color="Blush")

    with pytest.raises(CheckoutError):
        add_to_cart(dresses[1], request, build_index([]), today=TODAY)


def test_try_on_date_must_precede_earliest_rental():
    items = [_rental_item(start=date(2099, 6, 20)), _rental_item(dress_id="D1", start=date(2099, 6, 10), end=date(2099, 6, 12))]

    check_try_on_date(date(2099, 6, 9), items)
    with pytest.raises(CheckoutError):
        check_try_on_date(date(2099, 6, 10), items)


def test_try_on_date_free_without_rentals():
    purchase = CartItem(dress_id="D3", type="purchase", quantity=1, color="Champagne", buy_price=750)

    check_try_on_date(date(2099, 12, 31), [purchase])


def test_submit_order_writes_pending_booking(store):
    purchase = CartItem(dress_id="D3", type="purchase", quantity=2, color="Champagne", buy_price=1)
    request = CheckoutRequest(form=_form(), items=[_rental_item(), purchase])

    result = submit_order(store, AvailabilityService(store), request, today=TODAY)

    assert result.booking_id == "booking-1"
    assert result.status == "pending"
    # Prices come from the catalog, not from the submitted cart
    assert result.total == 150 * 3 + 750 * 2
    document = store.created[0]
    assert document["address"] == "12 Rue de Marseille, 1000, Tunis"
    assert document["try_on_date"] == "2099-06-05"
    assert document["status"] == "pending"
    rental_entry, purchase_entry = document["items"]
    assert rental_entry["dress_name"] == "Blush Ballgown"
    assert rental_entry["start_date"] == "2099-06-20"
    assert rental_entry["end_date"] == "2099-06-23"
    assert rental_entry["size"] == "M"
    assert "size" not in purchase_entry
    assert rental_entry["key"] != purchase_entry["key"]


def test_submit_order_revalidates_against_fresh_bookings(store):
    request = CheckoutRequest(form=_form(), items=[_rental_item()])
    # A booking confirmed after the cart was filled
    store.bookings.append(confirmed("b2", rental("D2", "2099-06-22", "2099-06-25")))

    with pytest.raises(ConflictError) as exc_info:
        submit_order(store, AvailabilityService(store), request, today=TODAY)

    assert exc_info.value.conflict.day == date(2099, 6, 22)
    assert store.created == []


def test_submit_order_rejects_overlapping_items_in_cart(store):
    items = [
        _rental_item(start=date(2099, 6, 20), end=date(2099, 6, 23)),
        _rental_item(start=date(2099, 6, 23), end=date(2099, 6, 26)),
    ]

    with pytest.raises(ConflictError) as exc_info:
        submit_order(store, AvailabilityService(store), CheckoutRequest(form=_form(), items=items), today=TODAY)

    assert exc_info.value.conflict.day == date(2099, 6, 23)


def test_submit_order_fails_closed_when_store_unreadable(store):
    store.fail_bookings = True
    request = CheckoutRequest(form=_form(), items=[_rental_item()])

    with pytest.raises(FetchFailure):
        submit_order(store, AvailabilityService(store), request, today=TODAY)

    assert store.created == []


def test_submit_order_rules(store):
    service = AvailabilityService(store)

    with pytest.raises(CheckoutError):
        submit_order(store, service, CheckoutRequest(form=_form(), items=[]), today=TODAY)
    with pytest.raises(CheckoutError):
        submit_order(store, service, CheckoutRequest(form=_form(), items=[_rental_item(dress_id="D9")]), today=TODAY)
    with pytest.raises(CheckoutError):
        late_try_on = _form(try_on_date=date(2099, 6, 20))
        submit_order(store, service, CheckoutRequest(form=late_try_on, items=[_rental_item()]), today=TODAY)
    assert store.created == []


def test_checkout_form_validation():
    with pytest.raises(ValueError):
        _form(state="Paris")
    with pytest.raises(ValueError):
        _form(phone="123")
