"""
Authoritative stock decrement.

The check "enough cartons on hand" and the decrement are one conditional
UPDATE, so two invoices racing for the last cartons cannot both win:

    UPDATE stock_items
       SET quantity_in_cartons = quantity_in_cartons - :cartons
     WHERE id = :id AND quantity_in_cartons >= :cartons

The guard never commits. The caller owns the transaction and rolls it back
if any line of the invoice fails.
"""
import logging
from typing import Optional

from sqlalchemy import update
from sqlalchemy.exc import OperationalError, SQLAlchemyError
from sqlalchemy.orm import Session

from crud.stock_item_audit import create_stock_item_audit
from models.stock_items import StockItem
from services.exceptions import ConcurrencyConflict, InsufficientStock, NotFound, StorageError, ValidationError

logger = logging.getLogger("stock_guard")


def commit(db: Session, item_id: int, cartons: int, changed_by: Optional[str] = None, note: Optional[str] = None) -> StockItem:
    """Take `cartons` out of stock for one item or raise without touching it."""
    if cartons < 1:
        raise ValidationError([f"cartons must be at least 1 (got {cartons})"])

    stmt = (
        update(StockItem)
        .where(StockItem.id == item_id, StockItem.quantity_in_cartons >= cartons)
        .values(quantity_in_cartons=StockItem.quantity_in_cartons - cartons)
        .execution_options(synchronize_session=False)
    )
    try:
        result = db.execute(stmt)
    except OperationalError as e:
        logger.warning(f"Stock row {item_id} is locked by a concurrent commit: {e}")
        raise ConcurrencyConflict(f"Stock item {item_id} is being updated concurrently, retry the submission.") from e
    except SQLAlchemyError as e:
        logger.exception(f"Stock decrement failed for item {item_id}")
        raise StorageError(f"Could not update stock for item {item_id}") from e

    # Refresh whatever copy this session holds so later reads see the new figure
    item = db.get(StockItem, item_id, populate_existing=True)
    if result.rowcount == 0:
        if item is None:
            raise NotFound(f"Stock item with ID {item_id} not found")
        logger.info(f"Rejected decrement of {cartons} cartons for '{item.name}' (on hand {item.quantity_in_cartons})")
        raise InsufficientStock(item.id, item.name, item.quantity_in_cartons, cartons)

    create_stock_item_audit(
        db,
        stock_item_id=item.id,
        change_type="sale",
        change_amount=-cartons,
        old_quantity=item.quantity_in_cartons + cartons,
        new_quantity=item.quantity_in_cartons,
        changed_by=changed_by,
        note=note,
    )
    return item
