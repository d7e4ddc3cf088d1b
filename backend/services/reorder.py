"""
Reorder suggestions from sales velocity.

avg_daily_sales is the number of cartons sold in the trailing window divided
by the window length. The suggestion covers REORDER_COVER_DAYS of sales at
that rate, net of what is on hand. No sales in the window means no
suggestion, whatever the stock level.
"""
from dataclasses import dataclass
from datetime import datetime, timedelta
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

import settings
from models.invoices import Invoice
from models.invoice_items import InvoiceItem
from models.stock_items import StockItem
from services.exceptions import ValidationError
from services.stock_status import StockStatus, classify
from utils.date_utils import as_local_naive, now_local

# (sold_at, cartons) pairs for one stock item
Sale = Tuple[datetime, int]


@dataclass(frozen=True)
class ReorderAdvice:
    avg_daily_sales: Decimal
    suggested_reorder_qty: int


def suggest(item, sales: Iterable[Sale], window_days: int, now: Optional[datetime] = None,
            cover_days: Optional[int] = None) -> ReorderAdvice:
    if window_days < 1:
        raise ValidationError([f"windowDays must be at least 1 (got {window_days})"])
    cover = settings.REORDER_COVER_DAYS if cover_days is None else cover_days

    end = as_local_naive(now or now_local())
    start = end - timedelta(days=window_days)
    sold = sum(cartons for sold_at, cartons in sales if start <= as_local_naive(sold_at) <= end)

    if sold == 0:
        return ReorderAdvice(avg_daily_sales=Decimal("0.00"), suggested_reorder_qty=0)

    velocity = Decimal(sold) / Decimal(window_days)
    cover_qty = int((velocity * cover).to_integral_value(rounding=ROUND_HALF_EVEN))
    return ReorderAdvice(
        avg_daily_sales=velocity.quantize(Decimal("0.01"), rounding=ROUND_HALF_EVEN),
        suggested_reorder_qty=max(0, cover_qty - item.quantity_in_cartons),
    )


def sales_in_window(db: Session, window_days: int, now: Optional[datetime] = None) -> Dict[int, List[Sale]]:
    """Invoice lines sold in the trailing window, grouped by stock item id."""
    end = now or now_local()
    start = end - timedelta(days=window_days)
    rows = (
        db.query(InvoiceItem.stock_item_id, Invoice.created_at, InvoiceItem.cartons_ordered)
        .join(Invoice, InvoiceItem.invoice_id == Invoice.id)
        .filter(Invoice.created_at >= start)
        .all()
    )
    grouped: Dict[int, List[Sale]] = {}
    for stock_item_id, created_at, cartons in rows:
        grouped.setdefault(stock_item_id, []).append((created_at, cartons))
    return grouped


def reorder_suggestions(db: Session, window_days: int, now: Optional[datetime] = None) -> List[Dict]:
    """Low and out-of-stock items that have a positive suggestion, largest first."""
    now = now or now_local()
    sales = sales_in_window(db, window_days, now)
    suggestions = []
    for item in db.query(StockItem).order_by(StockItem.name).all():
        status = classify(item, as_local_naive(now).date())
        if status not in (StockStatus.LOW_STOCK, StockStatus.OUT_OF_STOCK):
            continue
        advice = suggest(item, sales.get(item.id, []), window_days, now)
        if advice.suggested_reorder_qty <= 0:
            continue
        suggestions.append({
            "item": {
                "id": item.id,
                "name": item.name,
                "category": item.category,
                "current_stock": item.quantity_in_cartons,
                "status": status,
            },
            "analytics": {
                "avg_daily_sales": advice.avg_daily_sales,
                "suggested_reorder_qty": advice.suggested_reorder_qty,
            },
        })
    suggestions.sort(key=lambda s: s["analytics"]["suggested_reorder_qty"], reverse=True)
    return suggestions
