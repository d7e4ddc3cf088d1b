"""
Read-only sales figures derived from invoices and invoice lines.

Day boundaries are midnights in the application timezone. Per-day grouping
happens in Python after as_local_naive so it does not depend on the
database's date functions.
"""
from datetime import date, timedelta
from typing import Dict, List, Optional

from sqlalchemy import func
from sqlalchemy.orm import Session

from models.invoices import Invoice
from models.invoice_items import InvoiceItem
from models.stock_items import StockItem
from services.exceptions import NotFound, ValidationError
from services.money import ZERO, money2
from utils.date_utils import as_local_naive, local_day_bounds, today_local


def billing_summary(db: Session, today: Optional[date] = None) -> Dict:
    start, end = local_day_bounds(today or today_local())
    total_bills, total_revenue = db.query(func.count(Invoice.id), func.sum(Invoice.total_amount)).one()
    today_bills, today_revenue = (
        db.query(func.count(Invoice.id), func.sum(Invoice.total_amount))
        .filter(Invoice.created_at >= start, Invoice.created_at < end)
        .one()
    )
    return {
        "total_bills": total_bills,
        "total_revenue": money2(total_revenue),
        "today_bills": today_bills,
        "today_revenue": money2(today_revenue),
    }


def product_sales_summary(db: Session) -> List[Dict]:
    rows = (
        db.query(
            StockItem.id,
            StockItem.name,
            StockItem.category,
            func.sum(InvoiceItem.cartons_ordered),
            func.sum(InvoiceItem.line_total),
            func.max(Invoice.created_at),
        )
        .join(InvoiceItem, InvoiceItem.stock_item_id == StockItem.id)
        .join(Invoice, InvoiceItem.invoice_id == Invoice.id)
        .group_by(StockItem.id, StockItem.name, StockItem.category)
        .all()
    )
    summary = [
        {
            "id": item_id,
            "name": name,
            "category": category,
            "total_cartons_sold": int(cartons or 0),
            "total_revenue": money2(revenue),
            "last_sold_date": last_sold,
        }
        for item_id, name, category, cartons, revenue, last_sold in rows
    ]
    summary.sort(key=lambda row: row["total_revenue"], reverse=True)
    return summary


def product_history(db: Session, stock_item_id: int) -> List[Dict]:
    """Every sale of one item, newest first. `rate` is the carton price charged."""
    if db.get(StockItem, stock_item_id) is None:
        raise NotFound(f"Stock item with ID {stock_item_id} not found")

    rows = (
        db.query(InvoiceItem, Invoice)
        .join(Invoice, InvoiceItem.invoice_id == Invoice.id)
        .filter(InvoiceItem.stock_item_id == stock_item_id)
        .order_by(Invoice.created_at.desc(), Invoice.id.desc())
        .all()
    )
    return [
        {
            "date": invoice.created_at,
            "invoice_number": invoice.invoice_number,
            "customer_name": invoice.customer_name,
            "customer_phone": invoice.customer_phone,
            "quantity": line.cartons_ordered,
            "rate": money2(line.pack_price * line.packs_per_carton),
            "total": money2(line.line_total),
        }
        for line, invoice in rows
    ]


def sales_trend(db: Session, days: int, today: Optional[date] = None) -> List[Dict]:
    """Bills and revenue per day for the last `days` days including today, oldest first, zero-filled."""
    if days < 1:
        raise ValidationError([f"days must be at least 1 (got {days})"])
    today = today or today_local()
    first_day = today - timedelta(days=days - 1)
    start, _ = local_day_bounds(first_day)
    _, end = local_day_bounds(today)

    trend = {first_day + timedelta(days=n): {"bills": 0, "revenue": ZERO} for n in range(days)}
    rows = (
        db.query(Invoice.created_at, Invoice.total_amount)
        .filter(Invoice.created_at >= start, Invoice.created_at < end)
        .all()
    )
    for created_at, total_amount in rows:
        bucket = trend.get(as_local_naive(created_at).date())
        if bucket is None:
            continue
        bucket["bills"] += 1
        bucket["revenue"] += total_amount

    return [
        {"date": day, "bills": bucket["bills"], "revenue": money2(bucket["revenue"])}
        for day, bucket in sorted(trend.items())
    ]


def top_selling(db: Session, limit: int = 10) -> List[Dict]:
    total_quantity = func.sum(InvoiceItem.cartons_ordered)
    rows = (
        db.query(StockItem.id, StockItem.name, total_quantity, func.sum(InvoiceItem.line_total))
        .join(InvoiceItem, InvoiceItem.stock_item_id == StockItem.id)
        .group_by(StockItem.id, StockItem.name)
        .order_by(total_quantity.desc(), StockItem.id)
        .limit(limit)
        .all()
    )
    return [
        {"id": item_id, "name": name, "total_quantity": int(quantity or 0), "total_revenue": money2(revenue)}
        for item_id, name, quantity, revenue in rows
    ]
