from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query, Response
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.stock_items import StockCategory
from schemas.stock_items import StockItem, StockItemCreate, StockItemReplace, StockDashboard
from schemas.stock_item_audit import StockItemAudit
from services.exceptions import BillingError
from services.stock_status import StockStatus
from utils.auth_utils import get_user_identifier, require_role
from crud import stock_items as crud_stock_items
from crud import stock_item_audit as crud_stock_item_audit
from routers.errors import to_http_exception

router = APIRouter(prefix="/stock", tags=["Stock"])
logger = logging.getLogger("stock_items")


@router.get("", response_model=List[StockItem])
def read_stock_items(
    category: Optional[StockCategory] = None,
    status: Optional[StockStatus] = None,
    search: Optional[str] = None,
    sort: Optional[str] = Query(None, description="status, quantity-asc, quantity-desc, expiry-near or expiry-far"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """List stock items with optional category/status/search filters."""
    if sort and sort not in crud_stock_items.SORT_OPTIONS:
        raise HTTPException(status_code=400, detail=f"Unknown sort '{sort}'. Use one of: {', '.join(crud_stock_items.SORT_OPTIONS)}")
    return crud_stock_items.list_stock_items(
        db, category=category, status=status, search=search, sort=sort, skip=skip, limit=limit
    )


@router.get("/stats/dashboard", response_model=StockDashboard)
def read_stock_dashboard(db: Session = Depends(get_db)):
    return crud_stock_items.get_stock_dashboard(db)


@router.post("", response_model=StockItem, status_code=status.HTTP_201_CREATED)
def create_stock_item(
    item: StockItemCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_role(["admin"])),
):
    """Create a new stock item."""
    try:
        new_item = crud_stock_items.create_stock_item(db=db, item=item, user=user)
    except BillingError as e:
        raise to_http_exception(e)
    logger.info(f"Stock item '{new_item.name}' (batch {new_item.batch_number}) created by user {get_user_identifier(user)}")
    return new_item


@router.get("/{item_id}", response_model=StockItem)
def read_stock_item(item_id: int, db: Session = Depends(get_db)):
    db_item = crud_stock_items.get_stock_item(db=db, item_id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Stock item not found")
    return db_item


@router.put("/{item_id}", response_model=StockItem)
def replace_stock_item(
    item_id: int,
    item: StockItemReplace,
    db: Session = Depends(get_db),
    user: dict = Depends(require_role(["admin"])),
):
    """Replace every field of an existing stock item."""
    try:
        updated_item = crud_stock_items.replace_stock_item(db=db, item_id=item_id, item=item, user=user)
    except BillingError as e:
        raise to_http_exception(e)
    if updated_item is None:
        raise HTTPException(status_code=404, detail="Stock item not found")
    logger.info(f"Stock item '{updated_item.name}' (ID: {item_id}) replaced by user {get_user_identifier(user)}")
    return updated_item


@router.delete("/{item_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_stock_item(
    item_id: int,
    db: Session = Depends(get_db),
    user: dict = Depends(require_role(["admin"])),
):
    """Delete a stock item. Items that appear on an invoice cannot be deleted."""
    db_item = crud_stock_items.get_stock_item(db=db, item_id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Stock item not found")

    if crud_stock_items.is_invoiced(db, item_id):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Stock item appears on invoices and cannot be deleted."
        )

    name = db_item.name
    try:
        crud_stock_items.delete_stock_item(db=db, item_id=item_id, user=user)
    except BillingError as e:
        raise to_http_exception(e)
    logger.info(f"Stock item '{name}' (ID: {item_id}) deleted by user {get_user_identifier(user)}")
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.get("/{item_id}/audit", response_model=List[StockItemAudit])
def get_stock_item_audit_history(
    item_id: int,
    db: Session = Depends(get_db),
    start_date: Optional[date] = Query(None, alias="startDate", description="Start date for filtering audit history"),
    end_date: Optional[date] = Query(None, alias="endDate", description="End date for filtering audit history")
):
    """
    Retrieve the quantity history for a specific stock item.
    """
    db_item = crud_stock_items.get_stock_item(db=db, item_id=item_id)
    if db_item is None:
        raise HTTPException(status_code=404, detail="Stock item not found")

    return crud_stock_item_audit.get_stock_item_audits(
        db=db,
        stock_item_id=item_id,
        start_date=start_date,
        end_date=end_date
    )
