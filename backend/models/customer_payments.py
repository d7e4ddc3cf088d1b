from sqlalchemy import Column, Integer, Numeric, String, Text, Enum, CheckConstraint
from database import Base
from models.audit_mixin import TimestampMixin
from models.invoices import PaymentMethod, _enum_values


class CustomerPayment(Base, TimestampMixin):
    """A payment received from a customer. Rows are only ever inserted."""
    __tablename__ = "customer_payments"
    __table_args__ = (CheckConstraint("amount_paid > 0", name="ck_customer_payments_amount_positive"),)

    id = Column(Integer, primary_key=True, index=True)
    customer_phone = Column(String, nullable=False, index=True)
    customer_name = Column(String, nullable=False)
    amount_paid = Column(Numeric(12, 2), nullable=False)
    payment_method = Column(Enum(PaymentMethod, values_callable=_enum_values), nullable=False)
    note = Column(Text, nullable=True)
