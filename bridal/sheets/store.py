import uuid
from typing import Dict, List, Optional

import gspread
from google.auth.exceptions import GoogleAuthError

from .. import config
from ..models import Booking, BookingItem, Category, Dress
from ..service import FetchFailure
from .client import get_gspread_client

_STORE_ERRORS = (gspread.exceptions.GSpreadException, GoogleAuthError, OSError)


def _cell(record: Dict, key: str) -> str:
    value = record.get(key)
    if value is None:
        return ""
    return str(value).strip()


def _to_bool(value) -> bool:
    if isinstance(value, bool):
        return value
    return str(value).strip().upper() in ("TRUE", "YES", "1", "X")


def _to_float(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        return float(str(value).replace(",", "."))
    except ValueError:
        return None


def _to_int(value) -> int:
    number = _to_float(value)
    return int(number) if number is not None else 0


def _split_list(value) -> List[str]:
    """Split a 'Ivory, Blush' style cell into its entries."""
    return [part.strip() for part in str(value or "").split(",") if part.strip()]


def parse_booking_records(records: List[Dict], status: Optional[str] = None) -> List[Booking]:
    """Group Schedules rows (one per item) into bookings, keeping row order."""
    bookings: Dict[str, Booking] = {}
    for record in records:
        booking_id = _cell(record, "booking_id")
        if not booking_id:
            continue
        row_status = _cell(record, "status").lower()
        if status is not None and row_status != status:
            continue
        booking = bookings.get(booking_id)
        if booking is None:
            booking = Booking(id=booking_id, status=row_status)
            bookings[booking_id] = booking
        booking.items.append(BookingItem(
            key=_cell(record, "item_key") or None,
            dress_id=_cell(record, "dress_id") or None,
            dress_name=_cell(record, "dress_name") or None,
            start_date=_cell(record, "start_date") or None,
            end_date=_cell(record, "end_date") or None,
            type=_cell(record, "type").lower() or None,
            color=_cell(record, "color") or None,
            size=_cell(record, "size") or None,
            quantity=_to_int(record.get("quantity")),
            price_per_day=_to_float(record.get("price_per_day")),
            buy_price=_to_float(record.get("buy_price")),
        ))
    return list(bookings.values())


def parse_category_records(records: List[Dict]) -> List[Category]:
    categories = []
    for record in records:
        category_id = _cell(record, "id")
        if category_id:
            categories.append(Category(id=category_id, name=_cell(record, "name")))
    return categories


def parse_dress_records(records: List[Dict], categories: List[Category]) -> List[Dress]:
    by_id = {c.id: c for c in categories}
    dresses = []
    for record in records:
        dress_id = _cell(record, "id")
        if not dress_id:
            continue
        dresses.append(Dress(
            id=dress_id,
            name=_cell(record, "name"),
            description=_cell(record, "description"),
            new_collection=_to_bool(record.get("new_collection")),
            price_per_day=_to_float(record.get("price_per_day")) or 0,
            is_rent_on_discount=_to_bool(record.get("is_rent_on_discount")),
            new_price_per_day=_to_float(record.get("new_price_per_day")),
            is_for_sale=_to_bool(record.get("is_for_sale")),
            buy_price=_to_float(record.get("buy_price")),
            is_sell_on_discount=_to_bool(record.get("is_sell_on_discount")),
            new_buy_price=_to_float(record.get("new_buy_price")),
            colors=_split_list(record.get("colors")),
            sizes=_split_list(record.get("sizes")),
            # Unknown category ids are dropped, like a dangling reference
            categories=[by_id[c] for c in _split_list(record.get("categories")) if c in by_id],
        ))
    return dresses


def booking_rows(booking_id: str, document: Dict) -> List[List]:
    """Flatten a booking document into Schedules rows, one per item."""
    rows = []
    for item in document.get("items", []):
        values = {
            "booking_id": booking_id,
            "status": document.get("status", config.STATUS_PENDING),
            "full_name": document.get("full_name", ""),
            "phone": document.get("phone", ""),
            "address": document.get("address", ""),
            "note": document.get("note") or "",
            "try_on_date": document.get("try_on_date") or "",
            "total": document.get("total", 0),
            "item_key": item.get("key", ""),
            "dress_id": item.get("dress_id", ""),
            "dress_name": item.get("dress_name") or "",
            "color": item.get("color", ""),
            "size": item.get("size") or "",
            "quantity": item.get("quantity", 0),
            "start_date": item.get("start_date") or "",
            "end_date": item.get("end_date") or "",
            "price_per_day": "" if item.get("price_per_day") is None else item["price_per_day"],
            "buy_price": "" if item.get("buy_price") is None else item["buy_price"],
            "type": item.get("type", ""),
        }
        rows.append([values[column] for column in config.SCHEDULE_COLUMNS])
    return rows


class SheetsStore:
    """Booking store backed by one Google spreadsheet."""

    def __init__(self, sheet_link: str, client=None):
        self.sheet_link = sheet_link
        self._client = client

    def _spreadsheet(self):
        if self._client is None:
            self._client = get_gspread_client()
        return self._client.open_by_url(self.sheet_link)

    def _records(self, worksheet_title: str) -> List[Dict]:
        try:
            worksheet = self._spreadsheet().worksheet(worksheet_title)
            return worksheet.get_all_records()
        except _STORE_ERRORS as e:
            print(f"[STORE] Error reading worksheet {worksheet_title}: {e}")
            raise FetchFailure(f"Could not read {worksheet_title}: {e}") from e

    def fetch_confirmed_bookings(self) -> List[Booking]:
        records = self._records(config.SCHEDULES_WORKSHEET)
        bookings = parse_booking_records(records, status=config.STATUS_CONFIRMED)
        print(f"[STORE] Got {len(bookings)} confirmed bookings from {len(records)} rows")
        return bookings

    def fetch_categories(self) -> List[Category]:
        return parse_category_records(self._records(config.CATEGORIES_WORKSHEET))

    def fetch_dresses(self) -> List[Dress]:
        categories = self.fetch_categories()
        return parse_dress_records(self._records(config.DRESSES_WORKSHEET), categories)

    def fetch_dress(self, dress_id: str) -> Optional[Dress]:
        for dress in self.fetch_dresses():
            if dress.id == dress_id:
                return dress
        return None

    def create_booking(self, document: Dict) -> str:
        booking_id = uuid.uuid4().hex
        rows = booking_rows(booking_id, document)
        try:
            worksheet = self._spreadsheet().worksheet(config.SCHEDULES_WORKSHEET)
            worksheet.append_rows(rows, value_input_option="RAW")
        except _STORE_ERRORS as e:
            print(f"[STORE] Error writing booking {booking_id}: {e}")
            raise FetchFailure(f"Could not write booking: {e}") from e
        print(f"[STORE] Created booking {booking_id} with {len(rows)} items")
        return booking_id
