from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from pydantic import Field

from models.invoices import PaymentMethod, PaymentStatus
from models.stock_items import StockCategory
from schemas.common import CamelModel

PHONE_PATTERN = r"^\d{10}$"


class InvoiceLineIn(CamelModel):
    stock_id: int
    cartons_ordered: int = Field(..., ge=1)


class InvoiceCreate(CamelModel):
    customer_name: str = Field(..., min_length=1)
    customer_phone: str = Field(..., pattern=PHONE_PATTERN)
    customer_address: Optional[str] = None
    payment_method: PaymentMethod
    discount: Decimal = Field(Decimal("0"), ge=0)
    # An empty list is a business error (400), not a shape error
    items: List[InvoiceLineIn]


class InvoiceItem(CamelModel):
    id: int
    stock_item_id: int
    name: str
    packaging: str
    cartons_ordered: int
    packs_per_carton: int
    pack_price: Decimal
    line_total: Decimal


class Invoice(CamelModel):
    id: int
    invoice_number: str
    customer_name: str
    customer_phone: str
    customer_address: Optional[str] = None
    subtotal: Decimal
    gst: Decimal
    discount: Decimal
    total_amount: Decimal
    payment_method: PaymentMethod
    payment_status: PaymentStatus
    created_at: datetime
    created_by: Optional[str] = None
    items: List[InvoiceItem] = []


class QuoteLine(CamelModel):
    stock_item_id: int
    name: str
    packaging: str
    cartons_ordered: int
    packs_per_carton: int
    pack_price: Decimal
    line_total: Decimal


class InvoiceQuote(CamelModel):
    items: List[QuoteLine]
    subtotal: Decimal
    gst: Decimal
    discount: Decimal
    total_amount: Decimal


class BillingSummary(CamelModel):
    total_bills: int
    total_revenue: Decimal
    today_bills: int
    today_revenue: Decimal


class ProductSalesSummary(CamelModel):
    id: int
    name: str
    category: StockCategory
    total_cartons_sold: int
    total_revenue: Decimal
    last_sold_date: Optional[datetime] = None


class ProductHistoryEntry(CamelModel):
    date: datetime
    invoice_number: str
    customer_name: str
    customer_phone: str
    quantity: int
    rate: Decimal
    total: Decimal
