"""
Stock status classification.

The four-way status is derived from quantity and expiry only; it is never
stored. "Expiring soon" is a separate alert predicate (see stock_alerts.py)
and does not change the status.
"""
import enum
from datetime import date, timedelta
from typing import Optional

import settings
from utils.date_utils import today_local


class StockStatus(str, enum.Enum):
    IN_STOCK = "In Stock"
    LOW_STOCK = "Low Stock"
    OUT_OF_STOCK = "Out of Stock"
    EXPIRED = "Expired"


# Sort priority used by the stock listing
STATUS_ORDER = {
    StockStatus.IN_STOCK: 1,
    StockStatus.LOW_STOCK: 2,
    StockStatus.OUT_OF_STOCK: 3,
    StockStatus.EXPIRED: 4,
}


def classify(item, now: Optional[date] = None) -> StockStatus:
    """First match wins: expired, out of stock, low stock, in stock."""
    today = now or today_local()
    if item.expiry_date < today:
        return StockStatus.EXPIRED
    if item.quantity_in_cartons == 0:
        return StockStatus.OUT_OF_STOCK
    if item.quantity_in_cartons <= item.reorder_level:
        return StockStatus.LOW_STOCK
    return StockStatus.IN_STOCK


def is_expiring_soon(item, now: Optional[date] = None, days: Optional[int] = None) -> bool:
    """Not yet expired but expires within the next `days` days (inclusive), EXPIRING_SOON_DAYS by default."""
    today = now or today_local()
    if days is None:
        days = settings.EXPIRING_SOON_DAYS
    return today <= item.expiry_date <= today + timedelta(days=days)
