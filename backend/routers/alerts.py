from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from database import get_db
from schemas.alerts import StockAlerts
from services.stock_alerts import build_alerts

router = APIRouter(prefix="/alerts", tags=["Alerts"])


@router.get("", response_model=StockAlerts)
def read_stock_alerts(db: Session = Depends(get_db)):
    """Low stock, out of stock, expired and expiring-soon items with counts."""
    return build_alerts(db)
