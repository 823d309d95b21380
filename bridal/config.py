import os
from typing import List

# Remote store (Google Sheets) settings
CREDENTIALS_PATH: str = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "api_key.json")
STORE_SHEET_LINK: str = os.getenv("STORE_SHEET_LINK", "")
SCHEDULES_WORKSHEET: str = os.getenv("SCHEDULES_WORKSHEET", "Schedules")
DRESSES_WORKSHEET: str = os.getenv("DRESSES_WORKSHEET", "Dresses")
CATEGORIES_WORKSHEET: str = os.getenv("CATEGORIES_WORKSHEET", "Categories")

# Calendar days are taken in this zone when a timestamp carries an offset
STORE_TIMEZONE: str = os.getenv("STORE_TIMEZONE", "UTC")

# Booking statuses as written in the Schedules worksheet
STATUS_CONFIRMED = "confirmed"
STATUS_PENDING = "pending"

ITEM_RENTAL = "rental"
ITEM_PURCHASE = "purchase"

# Governorates accepted by the checkout form
TUNISIAN_STATES: List[str] = [
    "Ariana", "Béja", "Ben Arous", "Bizerte", "Gabès", "Gafsa", "Jendouba",
    "Kairouan", "Kasserine", "Kébili", "Le Kef", "Mahdia", "La Manouba",
    "Médenine", "Monastir", "Nabeul", "Sfax", "Sidi Bouzid", "Siliana",
    "Sousse", "Tataouine", "Tozeur", "Tunis", "Zaghouan",
]

# Column layout of the Schedules worksheet, one row per booking item
SCHEDULE_COLUMNS: List[str] = [
    "booking_id",
    "status",
    "full_name",
    "phone",
    "address",
    "note",
    "try_on_date",
    "total",
    "item_key",
    "dress_id",
    "dress_name",
    "color",
    "size",
    "quantity",
    "start_date",
    "end_date",
    "price_per_day",
    "buy_price",
    "type",
]


def store_configured() -> bool:
    return bool(STORE_SHEET_LINK)
