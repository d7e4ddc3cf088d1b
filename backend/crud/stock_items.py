import logging
from datetime import date
from typing import List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.invoice_items import InvoiceItem
from models.stock_items import StockItem
from schemas.stock_items import StockItemCreate, StockItemReplace
from services.exceptions import StorageError
from services.money import ZERO, money2
from services.stock_status import STATUS_ORDER, StockStatus, classify
from utils.auth_utils import get_user_identifier
from utils.date_utils import now_local, today_local
from crud.audit_log import create_audit_log
from crud.stock_item_audit import create_stock_item_audit
from schemas.audit_log import AuditLogCreate
from utils import sqlalchemy_to_dict

logger = logging.getLogger("stock_items")

SORT_OPTIONS = ("status", "quantity-asc", "quantity-desc", "expiry-near", "expiry-far")

_SQL_ORDER = {
    "quantity-asc": (StockItem.quantity_in_cartons.asc(), StockItem.id),
    "quantity-desc": (StockItem.quantity_in_cartons.desc(), StockItem.id),
    "expiry-near": (StockItem.expiry_date.asc(), StockItem.id),
    "expiry-far": (StockItem.expiry_date.desc(), StockItem.id),
}


def get_stock_item(db: Session, item_id: int):
    return db.query(StockItem).filter(StockItem.id == item_id).first()


def list_stock_items(
    db: Session,
    category: Optional[str] = None,
    status: Optional[StockStatus] = None,
    search: Optional[str] = None,
    sort: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
    today: Optional[date] = None,
) -> List[StockItem]:
    """
    Filtered, sorted page of the catalog.

    Status is derived, so the status filter and status sort run in Python
    over the SQL-filtered rows before the page is cut.
    """
    today = today or today_local()
    query = db.query(StockItem)
    if category:
        query = query.filter(StockItem.category == category)
    if search:
        pattern = f"%{search.lower()}%"
        query = query.filter(or_(
            func.lower(StockItem.name).like(pattern),
            func.lower(StockItem.manufacturer).like(pattern),
            func.lower(StockItem.batch_number).like(pattern),
        ))
    query = query.order_by(*_SQL_ORDER.get(sort, (StockItem.name, StockItem.id)))
    items = query.all()

    if status:
        items = [item for item in items if classify(item, today) == status]
    if sort == "status":
        # stable, so ties keep name order
        items.sort(key=lambda item: STATUS_ORDER[classify(item, today)])
    return items[skip:skip + limit]


def _stock_values(item: StockItemCreate) -> dict:
    values = item.model_dump()
    values["pack_cost_price"] = money2(values["pack_cost_price"])
    values["pack_selling_price"] = money2(values["pack_selling_price"])
    return values


def create_stock_item(db: Session, item: StockItemCreate, user: dict):
    user_identifier = get_user_identifier(user)
    db_item = StockItem(**_stock_values(item), created_by=user_identifier, updated_by=user_identifier)
    try:
        db.add(db_item)
        db.flush()
        create_audit_log(db, AuditLogCreate(
            table_name='stock_items',
            record_id=db_item.id,
            changed_by=user_identifier,
            action='CREATE',
            old_values={},
            new_values=sqlalchemy_to_dict(db_item)
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to create stock item '{item.name}'")
        raise StorageError("Could not save the stock item") from e
    db.refresh(db_item)
    return db_item


def replace_stock_item(db: Session, item_id: int, item: StockItemReplace, user: dict):
    """Overwrite every editable field. Returns None if the item does not exist."""
    db_item = get_stock_item(db, item_id)
    if db_item is None:
        return None

    user_identifier = get_user_identifier(user)
    old_values = sqlalchemy_to_dict(db_item)
    old_quantity = db_item.quantity_in_cartons
    try:
        for key, value in _stock_values(item).items():
            setattr(db_item, key, value)
        db_item.updated_at = now_local()
        db_item.updated_by = user_identifier

        if db_item.quantity_in_cartons != old_quantity:
            create_stock_item_audit(
                db,
                stock_item_id=db_item.id,
                change_type="manual",
                change_amount=db_item.quantity_in_cartons - old_quantity,
                old_quantity=old_quantity,
                new_quantity=db_item.quantity_in_cartons,
                changed_by=user_identifier,
                note="Stock edited",
            )
        db.flush()
        create_audit_log(db, AuditLogCreate(
            table_name='stock_items',
            record_id=item_id,
            changed_by=user_identifier,
            action='UPDATE',
            old_values=old_values,
            new_values=sqlalchemy_to_dict(db_item)
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to update stock item {item_id}")
        raise StorageError("Could not save the stock item") from e
    db.refresh(db_item)
    return db_item


def is_invoiced(db: Session, item_id: int) -> bool:
    return db.query(InvoiceItem.id).filter(InvoiceItem.stock_item_id == item_id).first() is not None


def delete_stock_item(db: Session, item_id: int, user: dict) -> bool:
    db_item = get_stock_item(db, item_id)
    if db_item is None:
        return False

    old_values = sqlalchemy_to_dict(db_item)
    try:
        db.delete(db_item)
        create_audit_log(db, AuditLogCreate(
            table_name='stock_items',
            record_id=item_id,
            changed_by=get_user_identifier(user),
            action='DELETE',
            old_values=old_values,
            new_values=None
        ))
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to delete stock item {item_id}")
        raise StorageError("Could not delete the stock item") from e
    return True


def get_stock_dashboard(db: Session, today: Optional[date] = None) -> dict:
    today = today or today_local()
    items = db.query(StockItem).all()
    statuses = [classify(item, today) for item in items]
    return {
        "total_items": len(items),
        "total_value": money2(sum((item.stock_value for item in items), ZERO)),
        "low_stock": statuses.count(StockStatus.LOW_STOCK),
        "out_of_stock": statuses.count(StockStatus.OUT_OF_STOCK),
        "expired": statuses.count(StockStatus.EXPIRED),
    }
