"""
Invoice calculation and creation.

compute_totals is pure and is also used for quotes. finalize turns a cart
into a persisted invoice:

1. reject empty carts and bad discounts,
2. allocate the invoice number (committed on its own, never reused),
3. take stock for every line through stock_guard in one transaction,
4. write the invoice and its lines, then commit.

Any failure in 3 or 4 rolls the whole transaction back, so there is never a
partial stock decrement or a half-written invoice.
"""
import logging
from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, selectinload

import settings
from models.invoices import Invoice, PaymentMethod, PaymentStatus
from models.invoice_items import InvoiceItem
from services import ledger, number_series, stock_guard
from services.cart import Cart, line_total
from services.exceptions import BillingError, EmptyCart, InvalidDiscount, StorageError
from services.money import D, ZERO, money2

logger = logging.getLogger("billing")


@dataclass(frozen=True)
class InvoiceTotals:
    subtotal: Decimal
    gst: Decimal
    discount: Decimal
    total_amount: Decimal


@dataclass
class CustomerInfo:
    customer_name: str
    customer_phone: str
    payment_method: PaymentMethod
    customer_address: Optional[str] = None
    discount: Decimal = ZERO


def compute_totals(cart: Cart, discount=ZERO, gst_rate: Optional[Decimal] = None) -> InvoiceTotals:
    if cart.is_empty:
        raise EmptyCart()

    rate = settings.GST_RATE if gst_rate is None else D(gst_rate)
    discount = money2(discount)
    if discount < 0:
        raise InvalidDiscount("Discount cannot be negative.")

    subtotal = money2(cart.subtotal)
    gst = money2(subtotal * rate)
    gross = subtotal + gst
    if discount > gross:
        raise InvalidDiscount(f"Discount ({discount}) exceeds the invoice amount ({gross}).")

    return InvoiceTotals(subtotal=subtotal, gst=gst, discount=discount, total_amount=gross - discount)


def finalize(db: Session, cart: Cart, customer: CustomerInfo, changed_by: Optional[str] = None) -> Invoice:
    """Create the invoice for `cart` or raise, leaving stock untouched."""
    totals = compute_totals(cart, customer.discount)

    number = number_series.allocate_number(db, number_series.INVOICE_SERIES)
    invoice_number = number_series.format_number(settings.INVOICE_PREFIX, number, settings.INVOICE_NUMBER_PADDING)

    try:
        # Lock rows in id order so two carts never wait on each other in a cycle
        for line in sorted(cart.lines, key=lambda l: l.stock_item_id):
            stock_guard.commit(
                db,
                line.stock_item_id,
                line.cartons_ordered,
                changed_by=changed_by,
                note=f"Sold via {invoice_number}",
            )

        invoice = Invoice(
            invoice_number=invoice_number,
            customer_name=customer.customer_name,
            customer_phone=customer.customer_phone,
            customer_address=customer.customer_address,
            subtotal=totals.subtotal,
            gst=totals.gst,
            discount=totals.discount,
            total_amount=totals.total_amount,
            payment_method=customer.payment_method,
            payment_status=PaymentStatus.PENDING,
            created_by=changed_by,
        )
        # Lines keep the price quoted when they were added to the cart
        for line in cart.lines:
            invoice.items.append(InvoiceItem(
                stock_item_id=line.stock_item_id,
                name=line.name,
                packaging=line.packaging,
                cartons_ordered=line.cartons_ordered,
                packs_per_carton=line.packs_per_carton,
                pack_price=money2(line.pack_price),
                line_total=money2(line_total(line)),
            ))
        db.add(invoice)
        db.flush()

        # Credit already on the account may settle the new invoice right away
        ledger.apply_payment_statuses(db, customer.customer_phone)
        db.commit()
    except BillingError:
        db.rollback()
        logger.warning(f"Invoice {invoice_number} abandoned; stock changes rolled back")
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to persist invoice {invoice_number}")
        raise StorageError("Could not save the invoice") from e

    logger.info(f"Invoice {invoice_number} created for {customer.customer_phone}: total {totals.total_amount}")
    return get_invoice(db, invoice.id)


def get_invoice(db: Session, invoice_id: int) -> Optional[Invoice]:
    return db.query(Invoice).options(selectinload(Invoice.items)).filter(Invoice.id == invoice_id).first()
