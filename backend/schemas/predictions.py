import datetime
from decimal import Decimal
from typing import List

from models.stock_items import StockCategory
from schemas.common import CamelModel
from services.stock_status import StockStatus


class ReorderItem(CamelModel):
    id: int
    name: str
    category: StockCategory
    current_stock: int
    status: StockStatus


class ReorderAnalytics(CamelModel):
    avg_daily_sales: Decimal
    suggested_reorder_qty: int


class ReorderSuggestion(CamelModel):
    item: ReorderItem
    analytics: ReorderAnalytics


class SalesTrendPoint(CamelModel):
    date: datetime.date
    bills: int
    revenue: Decimal


class TopSellingItem(CamelModel):
    id: int
    name: str
    total_quantity: int
    total_revenue: Decimal
