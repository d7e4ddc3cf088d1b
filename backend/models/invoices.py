from sqlalchemy import Column, Integer, String, Text, Numeric, Enum
from sqlalchemy.orm import relationship
from database import Base
import enum
from models.audit_mixin import TimestampMixin


class PaymentMethod(enum.Enum):
    CASH = "Cash"
    CARD = "Card"
    UPI = "UPI"
    NET_BANKING = "Net Banking"


class PaymentStatus(enum.Enum):
    PAID = "Paid"
    PENDING = "Pending"
    PARTIAL = "Partial"


def _enum_values(enum_cls):
    return [member.value for member in enum_cls]


class Invoice(Base, TimestampMixin):
    __tablename__ = "invoices"

    id = Column(Integer, primary_key=True, index=True)
    invoice_number = Column(String, unique=True, nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    customer_phone = Column(String, nullable=False, index=True) # ledger key
    customer_address = Column(Text, nullable=True)
    subtotal = Column(Numeric(12, 2), nullable=False)
    gst = Column(Numeric(12, 2), nullable=False)
    discount = Column(Numeric(12, 2), default=0, nullable=False)
    total_amount = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(Enum(PaymentMethod, values_callable=_enum_values), nullable=False)
    payment_status = Column(Enum(PaymentStatus, values_callable=_enum_values),
                            default=PaymentStatus.PENDING, nullable=False)

    # Relationships
    items = relationship("InvoiceItem", back_populates="invoice", cascade="all, delete-orphan",
                         order_by="InvoiceItem.id")
