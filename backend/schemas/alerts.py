from typing import List

from schemas.common import CamelModel
from schemas.stock_items import StockItem


class AlertSummary(CamelModel):
    low_stock_count: int
    out_of_stock_count: int
    expired_count: int
    expiring_soon_count: int
    total_alerts: int


class StockAlerts(CamelModel):
    low_stock: List[StockItem]
    out_of_stock: List[StockItem]
    expired: List[StockItem]
    expiring_soon: List[StockItem]
    summary: AlertSummary
