from datetime import datetime
from typing import Optional

from schemas.common import CamelModel


class StockItemAudit(CamelModel):
    id: int
    stock_item_id: int
    change_type: str
    change_amount: int
    old_quantity: int
    new_quantity: int
    changed_by: Optional[str] = None
    timestamp: datetime
    note: Optional[str] = None
