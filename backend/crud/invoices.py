from datetime import date
from typing import Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session, selectinload

from models.invoices import Invoice, PaymentMethod, PaymentStatus
from utils.date_utils import local_day_bounds


def get_invoices(
    db: Session,
    date_from: Optional[date] = None,
    date_to: Optional[date] = None,
    payment_status: Optional[PaymentStatus] = None,
    payment_method: Optional[PaymentMethod] = None,
    customer_search: Optional[str] = None,
    skip: int = 0,
    limit: int = 100,
):
    """Invoices newest first. Date filters are inclusive calendar days in the application timezone."""
    query = db.query(Invoice).options(selectinload(Invoice.items))
    if date_from:
        query = query.filter(Invoice.created_at >= local_day_bounds(date_from)[0])
    if date_to:
        query = query.filter(Invoice.created_at < local_day_bounds(date_to)[1])
    if payment_status:
        query = query.filter(Invoice.payment_status == payment_status)
    if payment_method:
        query = query.filter(Invoice.payment_method == payment_method)
    if customer_search:
        pattern = f"%{customer_search}%"
        query = query.filter(or_(
            Invoice.customer_name.ilike(pattern),
            Invoice.customer_phone.like(pattern),
            Invoice.invoice_number.ilike(pattern),
        ))
    return query.order_by(Invoice.created_at.desc(), Invoice.id.desc()).offset(skip).limit(limit).all()
