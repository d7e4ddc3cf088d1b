from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field, model_validator

from models.stock_items import StockCategory
from schemas.common import CamelModel
from services.stock_status import StockStatus
from settings import DEFAULT_REORDER_LEVEL


class StockItemBase(CamelModel):
    name: str = Field(..., min_length=1)
    category: StockCategory = StockCategory.MEDICINE
    manufacturer: str = Field(..., min_length=1)
    batch_number: str = Field(..., min_length=1)
    units_per_pack: int = Field(1, ge=1)
    packs_per_carton: int = Field(1, ge=1)
    quantity_in_cartons: int = Field(0, ge=0)
    pack_cost_price: Decimal = Field(..., ge=0)
    pack_selling_price: Decimal = Field(..., ge=0)
    manufacturing_date: Optional[date] = None
    expiry_date: date
    reorder_level: int = Field(DEFAULT_REORDER_LEVEL, ge=0) # in cartons
    location: str = "Main Storage"

    @model_validator(mode="after")
    def check_dates(self):
        if self.manufacturing_date and self.manufacturing_date > self.expiry_date:
            raise ValueError("manufacturingDate must not be after expiryDate")
        return self


class StockItemCreate(StockItemBase):
    pass


# PUT replaces the whole record, so every field is validated as on create
class StockItemReplace(StockItemBase):
    pass


class StockItem(StockItemBase):
    id: int
    status: StockStatus
    total_packs: int
    carton_selling_price: Decimal
    carton_cost_price: Decimal
    stock_value: Decimal
    packaging: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    created_by: Optional[str] = None
    updated_by: Optional[str] = None


class StockDashboard(CamelModel):
    total_items: int
    total_value: Decimal
    low_stock: int
    out_of_stock: int
    expired: int
