from datetime import date
from fastapi import APIRouter, Depends, HTTPException, status, Query
from sqlalchemy.orm import Session
from typing import List, Optional
import logging

from database import get_db
from models.invoices import PaymentMethod, PaymentStatus
from schemas.billing import (
    Invoice as InvoiceSchema,
    InvoiceCreate,
    InvoiceQuote,
    BillingSummary,
    ProductSalesSummary,
    ProductHistoryEntry,
)
from services import billing, sales_analytics
from services.cart import build_cart, line_total
from services.exceptions import BillingError
from services.money import money2
from utils.auth_utils import get_user_identifier, require_role
from crud import invoices as crud_invoices
from crud import stock_items as crud_stock_items
from routers.errors import to_http_exception

router = APIRouter(prefix="/billing", tags=["Billing"])
logger = logging.getLogger("billing")


def _cart_for(db: Session, invoice_in: InvoiceCreate):
    # A fresh cart per request; repeated stock ids accumulate
    return build_cart(
        lambda item_id: crud_stock_items.get_stock_item(db, item_id),
        [(line.stock_id, line.cartons_ordered) for line in invoice_in.items],
    )


@router.post("", response_model=InvoiceSchema, status_code=status.HTTP_201_CREATED)
def create_invoice(
    invoice_in: InvoiceCreate,
    db: Session = Depends(get_db),
    user: dict = Depends(require_role(["admin"])),
):
    """Create an invoice and take its cartons out of stock."""
    user_identifier = get_user_identifier(user)
    try:
        cart = _cart_for(db, invoice_in)
        customer = billing.CustomerInfo(
            customer_name=invoice_in.customer_name,
            customer_phone=invoice_in.customer_phone,
            customer_address=invoice_in.customer_address,
            payment_method=invoice_in.payment_method,
            discount=invoice_in.discount,
        )
        invoice = billing.finalize(db, cart, customer, changed_by=user_identifier)
    except BillingError as e:
        logger.warning(f"Invoice for {invoice_in.customer_phone} rejected: {e.message}")
        raise to_http_exception(e)
    logger.info(f"Invoice {invoice.invoice_number} created by user {user_identifier}")
    return invoice


@router.post("/quote", response_model=InvoiceQuote)
def quote_invoice(invoice_in: InvoiceCreate, db: Session = Depends(get_db)):
    """Price a cart without saving anything or touching stock."""
    try:
        cart = _cart_for(db, invoice_in)
        totals = billing.compute_totals(cart, invoice_in.discount)
    except BillingError as e:
        raise to_http_exception(e)
    return {
        "items": [
            {
                "stock_item_id": line.stock_item_id,
                "name": line.name,
                "packaging": line.packaging,
                "cartons_ordered": line.cartons_ordered,
                "packs_per_carton": line.packs_per_carton,
                "pack_price": money2(line.pack_price),
                "line_total": money2(line_total(line)),
            }
            for line in cart.lines
        ],
        "subtotal": totals.subtotal,
        "gst": totals.gst,
        "discount": totals.discount,
        "total_amount": totals.total_amount,
    }


@router.get("", response_model=List[InvoiceSchema])
def read_invoices(
    date_from: Optional[date] = Query(None, alias="dateFrom"),
    date_to: Optional[date] = Query(None, alias="dateTo"),
    payment_status: Optional[PaymentStatus] = Query(None, alias="paymentStatus"),
    payment_method: Optional[PaymentMethod] = Query(None, alias="paymentMethod"),
    customer_search: Optional[str] = Query(None, alias="customerSearch"),
    skip: int = Query(0, ge=0),
    limit: int = Query(100, ge=1, le=1000),
    db: Session = Depends(get_db),
):
    """Retrieve invoices, newest first."""
    return crud_invoices.get_invoices(
        db,
        date_from=date_from,
        date_to=date_to,
        payment_status=payment_status,
        payment_method=payment_method,
        customer_search=customer_search,
        skip=skip,
        limit=limit,
    )


@router.get("/stats/summary", response_model=BillingSummary)
def read_billing_summary(db: Session = Depends(get_db)):
    return sales_analytics.billing_summary(db)


@router.get("/product-sales/summary", response_model=List[ProductSalesSummary])
def read_product_sales_summary(db: Session = Depends(get_db)):
    return sales_analytics.product_sales_summary(db)


@router.get("/product-history/{stock_id}", response_model=List[ProductHistoryEntry])
def read_product_history(stock_id: int, db: Session = Depends(get_db)):
    try:
        return sales_analytics.product_history(db, stock_id)
    except BillingError as e:
        raise to_http_exception(e)


@router.get("/{invoice_id}", response_model=InvoiceSchema)
def read_invoice(invoice_id: int, db: Session = Depends(get_db)):
    invoice = billing.get_invoice(db, invoice_id)
    if invoice is None:
        raise HTTPException(status_code=404, detail="Invoice not found")
    return invoice
