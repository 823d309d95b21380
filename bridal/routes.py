from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from . import config
from .availability import InvalidRangeError, check_range_order, validate_range
from .catalog import DEFAULT_PRICE_RANGE, ListingFilters, parse_month
from .checkout import CheckoutError, ConflictError, add_to_cart, submit_order
from .dates import InvalidDateError, normalize
from .models import (
    CartItem,
    CartItemRequest,
    Category,
    CheckoutRequest,
    CheckoutResult,
    Dress,
    DressCalendar,
    DressListing,
    RangeCheckResult,
)
from .service import AvailabilityService, BookingStore, FetchFailure
from .session import StorefrontSession
from .sheets.store import SheetsStore

router = APIRouter()


def get_store() -> BookingStore:
    if not config.store_configured():
        raise HTTPException(status_code=503, detail="Booking store is not configured")
    return SheetsStore(config.STORE_SHEET_LINK)


def get_availability_service(store: BookingStore = Depends(get_store)) -> AvailabilityService:
    return AvailabilityService(store)


def _parse_day(value: str, name: str):
    try:
        return normalize(value)
    except InvalidDateError as e:
        raise HTTPException(status_code=400, detail=f"Invalid {name}: {e}")


def _get_dress(store: BookingStore, dress_id: str) -> Dress:
    try:
        dress = store.fetch_dress(dress_id)
    except FetchFailure as e:
        raise HTTPException(status_code=503, detail=f"Catalog unavailable: {e}")
    if dress is None:
        raise HTTPException(status_code=404, detail="Dress not found")
    return dress


@router.get("/health")
async def health():
    return {"status": "ok"}


@router.get("/categories", response_model=List[Category])
async def list_categories(store: BookingStore = Depends(get_store)):
    try:
        return store.fetch_categories()
    except FetchFailure as e:
        raise HTTPException(status_code=503, detail=f"Catalog unavailable: {e}")


@router.get("/dresses", response_model=DressListing)
async def list_dresses(
    date: Optional[str] = Query(None, description="Desired rental start date, YYYY-MM-DD"),
    color: Optional[str] = Query(None),
    size: List[str] = Query([]),
    min_price: float = Query(DEFAULT_PRICE_RANGE[0]),
    max_price: float = Query(DEFAULT_PRICE_RANGE[1]),
    type: str = Query("all", pattern="^(all|rental|purchase)$"),
    search: str = Query(""),
    category: Optional[str] = Query(None, description="Category id"),
    store: BookingStore = Depends(get_store),
    service: AvailabilityService = Depends(get_availability_service),
):
    filters = ListingFilters(
        category=category,
        color=color,
        sizes=size,
        min_price=min_price,
        max_price=max_price,
        type=type,
        search=search,
        start_date=_parse_day(date, "date") if date else None,
    )
    try:
        dresses = store.fetch_dresses()
    except FetchFailure as e:
        raise HTTPException(status_code=503, detail=f"Catalog unavailable: {e}")

    session = StorefrontSession(filters=filters)
    session.load(service)
    visible = session.visible_dresses(dresses)
    print(f"[ROUTES] Listing {len(visible)} of {len(dresses)} dresses (stale={session.stale})")
    return DressListing(dresses=visible, stale=session.stale)


@router.get("/dresses/{dress_id}", response_model=Dress)
async def get_dress(dress_id: str, store: BookingStore = Depends(get_store)):
    return _get_dress(store, dress_id)


@router.get("/dresses/{dress_id}/calendar", response_model=DressCalendar)
async def dress_calendar(
    dress_id: str,
    month: Optional[str] = Query(None, description="YYYY-MM, defaults to the current month"),
    store: BookingStore = Depends(get_store),
    service: AvailabilityService = Depends(get_availability_service),
):
    dress = _get_dress(store, dress_id)
    session = StorefrontSession()
    if month is None:
        year, month_number = session.today.year, session.today.month
    else:
        try:
            year, month_number = parse_month(month)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
    session.load(service)
    return DressCalendar(
        dress_id=dress.id,
        month=f"{year:04d}-{month_number:02d}",
        stale=session.stale,
        days=session.month_calendar(dress.id, year, month_number),
    )


@router.get("/dresses/{dress_id}/availability", response_model=RangeCheckResult)
async def dress_availability(
    dress_id: str,
    start: str = Query(..., description="YYYY-MM-DD"),
    end: str = Query(..., description="YYYY-MM-DD"),
    service: AvailabilityService = Depends(get_availability_service),
):
    start_day = _parse_day(start, "start")
    end_day = _parse_day(end, "end")
    try:
        check_range_order(start_day, end_day)
    except InvalidRangeError as e:
        raise HTTPException(status_code=400, detail=str(e))

    snapshot = service.load()
    conflict = validate_range(snapshot.index, dress_id, start_day, end_day)
    return RangeCheckResult(
        dress_id=dress_id,
        start=start_day,
        end=end_day,
        available=conflict is None,
        conflict_date=conflict.day if conflict else None,
        message=conflict.message if conflict else None,
        stale=snapshot.stale,
    )


@router.post("/cart/items", response_model=CartItem)
async def add_cart_item(
    body: CartItemRequest,
    store: BookingStore = Depends(get_store),
    service: AvailabilityService = Depends(get_availability_service),
):
    dress = _get_dress(store, body.dress_id)
    session = StorefrontSession()
    snapshot = session.load(service)
    try:
        return add_to_cart(dress, body, snapshot.index, today=session.today)
    except (CheckoutError, InvalidRangeError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/checkout", response_model=CheckoutResult)
async def checkout(
    body: CheckoutRequest,
    store: BookingStore = Depends(get_store),
    service: AvailabilityService = Depends(get_availability_service),
):
    print(f"[API] POST /checkout called with {len(body.items)} items")
    try:
        return submit_order(store, service, body)
    except (CheckoutError, InvalidRangeError, InvalidDateError) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except ConflictError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except FetchFailure as e:
        print(f"[CHECKOUT] Refusing order, bookings could not be verified: {e}")
        raise HTTPException(
            status_code=503,
            detail="There was an error submitting your order. Please try again.",
        )
