from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session
from typing import List, Optional

from database import get_db
from crud import app_config as crud_app_config
from schemas.predictions import ReorderSuggestion, SalesTrendPoint, TopSellingItem
from services import reorder, sales_analytics
from services.exceptions import BillingError
from routers.errors import to_http_exception

router = APIRouter(prefix="/predictions", tags=["Predictions"])


@router.get("/reorder-suggestions", response_model=List[ReorderSuggestion])
def read_reorder_suggestions(
    window_days: Optional[int] = Query(None, alias="windowDays", ge=1, le=365),
    db: Session = Depends(get_db),
):
    """Low and out-of-stock items worth reordering, judged on recent sales velocity."""
    if window_days is None:
        window_days = crud_app_config.get_int_setting(db, "REORDER_WINDOW_DAYS")
    try:
        return reorder.reorder_suggestions(db, window_days)
    except BillingError as e:
        raise to_http_exception(e)


@router.get("/sales-trend", response_model=List[SalesTrendPoint])
def read_sales_trend(days: int = Query(30, ge=1, le=365), db: Session = Depends(get_db)):
    try:
        return sales_analytics.sales_trend(db, days)
    except BillingError as e:
        raise to_http_exception(e)


@router.get("/top-selling", response_model=List[TopSellingItem])
def read_top_selling(limit: int = Query(10, ge=1, le=100), db: Session = Depends(get_db)):
    return sales_analytics.top_selling(db, limit)
