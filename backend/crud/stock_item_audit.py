from sqlalchemy.orm import Session
from models.stock_item_audit import StockItemAudit
from typing import Optional
from datetime import date

from utils.date_utils import local_day_bounds, now_local


def get_stock_item_audits(
    db: Session,
    stock_item_id: int,
    start_date: Optional[date] = None,
    end_date: Optional[date] = None
):
    query = db.query(StockItemAudit).filter(StockItemAudit.stock_item_id == stock_item_id)

    if start_date:
        query = query.filter(StockItemAudit.timestamp >= local_day_bounds(start_date)[0])
    if end_date:
        query = query.filter(StockItemAudit.timestamp < local_day_bounds(end_date)[1])

    return query.order_by(StockItemAudit.timestamp.desc(), StockItemAudit.id.desc()).all()


def create_stock_item_audit(
    db: Session,
    stock_item_id: int,
    change_type: str,
    change_amount: int,
    old_quantity: int,
    new_quantity: int,
    changed_by: Optional[str] = None,
    note: Optional[str] = None
):
    """Stage a stock audit record. The caller commits."""
    audit = StockItemAudit(
        stock_item_id=stock_item_id,
        change_type=change_type,
        change_amount=change_amount,
        old_quantity=old_quantity,
        new_quantity=new_quantity,
        changed_by=changed_by,
        note=note,
        timestamp=now_local()
    )
    db.add(audit)
    return audit
