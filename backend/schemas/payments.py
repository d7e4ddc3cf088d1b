from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import Field

from models.invoices import PaymentMethod
from schemas.billing import PHONE_PATTERN
from schemas.common import CamelModel


class PaymentCreate(CamelModel):
    customer_phone: str = Field(..., pattern=PHONE_PATTERN)
    customer_name: str = Field(..., min_length=1)
    amount_paid: Decimal = Field(..., gt=0)
    payment_method: PaymentMethod
    note: Optional[str] = None


class Payment(CamelModel):
    id: int
    customer_phone: str
    customer_name: str
    amount_paid: Decimal
    payment_method: PaymentMethod
    note: Optional[str] = None
    created_at: datetime
    created_by: Optional[str] = None
