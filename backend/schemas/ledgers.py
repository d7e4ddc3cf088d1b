from datetime import datetime
from decimal import Decimal
from typing import List, Optional

from schemas.common import CamelModel


class LedgerEntry(CamelModel):
    date: datetime
    type: str
    description: str
    reference: str
    debit: Decimal
    credit: Decimal
    balance: Decimal


class CustomerLedger(CamelModel):
    customer_name: Optional[str] = None
    customer_phone: str
    current_balance: Decimal
    total_billed: Decimal
    total_paid: Decimal
    history: List[LedgerEntry]


class CustomerSummary(CamelModel):
    phone: str
    name: Optional[str] = None
    total_billed: Decimal
    total_paid: Decimal
    balance: Decimal
    invoice_count: int
    last_activity: Optional[datetime] = None
