"""
Stock alert buckets for the alerts page and the end-of-day task.

An item lands in exactly one of expired / out of stock / low stock according
to its status, and independently in expiring soon when its expiry date falls
inside the configured window.
"""
from datetime import date
from typing import Dict, Optional

from sqlalchemy.orm import Session

from crud import app_config as crud_app_config
from models.stock_items import StockItem
from services.stock_status import StockStatus, classify, is_expiring_soon
from utils.date_utils import today_local

_BUCKET_BY_STATUS = {
    StockStatus.LOW_STOCK: "low_stock",
    StockStatus.OUT_OF_STOCK: "out_of_stock",
    StockStatus.EXPIRED: "expired",
}


def expiring_soon_days(db: Session) -> int:
    return crud_app_config.get_int_setting(db, "EXPIRING_SOON_DAYS")


def build_alerts(db: Session, today: Optional[date] = None, days: Optional[int] = None) -> Dict:
    today = today or today_local()
    days = expiring_soon_days(db) if days is None else days

    alerts = {"low_stock": [], "out_of_stock": [], "expired": [], "expiring_soon": []}
    for item in db.query(StockItem).order_by(StockItem.expiry_date, StockItem.name).all():
        bucket = _BUCKET_BY_STATUS.get(classify(item, today))
        if bucket:
            alerts[bucket].append(item)
        if is_expiring_soon(item, today, days):
            alerts["expiring_soon"].append(item)

    counts = {f"{name}_count": len(items) for name, items in alerts.items()}
    counts["total_alerts"] = sum(counts.values())
    alerts["summary"] = counts
    return alerts
