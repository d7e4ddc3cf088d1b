"""
Customer ledger.

Invoices (debits) and payments (credits) are append-only facts keyed by the
customer's phone number. The ledger is recomputed from those facts on every
read; no balance is stored anywhere.

Ordering: creation timestamp ascending. On equal timestamps invoices come
before payments, and rows of the same kind keep their id order. The final
balance is the same whichever order the rows were inserted in.
"""
import logging
from dataclasses import dataclass, asdict
from datetime import datetime
from decimal import Decimal
from typing import Dict, Iterable, List, Optional

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from models.customer_payments import CustomerPayment
from models.invoices import Invoice, PaymentStatus
from services.exceptions import NotFound, StorageError, ValidationError
from services.money import D, ZERO, money2
from utils.date_utils import as_local_naive

logger = logging.getLogger("ledger")

ENTRY_INVOICE = "Invoice"
ENTRY_PAYMENT = "Payment"

# Invoices sort ahead of payments stamped at the same instant
_TYPE_RANK = {ENTRY_INVOICE: 0, ENTRY_PAYMENT: 1}


@dataclass
class LedgerEntry:
    date: datetime
    type: str
    description: str
    reference: str
    debit: Decimal
    credit: Decimal
    balance: Decimal = ZERO


def _invoice_entry(invoice) -> LedgerEntry:
    return LedgerEntry(
        date=invoice.created_at,
        type=ENTRY_INVOICE,
        description=f"Invoice {invoice.invoice_number}",
        reference=invoice.invoice_number,
        debit=money2(invoice.total_amount),
        credit=ZERO,
    )


def _payment_entry(payment) -> LedgerEntry:
    method = getattr(payment.payment_method, "value", payment.payment_method)
    description = f"Payment ({method})"
    if payment.note:
        description += f" - {payment.note}"
    return LedgerEntry(
        date=payment.created_at,
        type=ENTRY_PAYMENT,
        description=description,
        reference=str(payment.id),
        debit=ZERO,
        credit=money2(payment.amount_paid),
    )


def _order_key(entry_date: datetime, entry_type: str, row_id: int):
    return (as_local_naive(entry_date), _TYPE_RANK[entry_type], row_id)


def merge_entries(invoices: Iterable, payments: Iterable) -> List[LedgerEntry]:
    """Merge invoices and payments into one ordered list and carry the running balance."""
    keyed = [(_order_key(inv.created_at, ENTRY_INVOICE, inv.id), _invoice_entry(inv)) for inv in invoices]
    keyed += [(_order_key(p.created_at, ENTRY_PAYMENT, p.id), _payment_entry(p)) for p in payments]
    keyed.sort(key=lambda pair: pair[0])

    balance = ZERO
    entries = []
    for _, entry in keyed:
        balance = balance + entry.debit - entry.credit
        entry.balance = balance
        entries.append(entry)
    return entries


def _latest_name(invoices: List[Invoice], payments: List[CustomerPayment]) -> Optional[str]:
    if invoices:
        latest = max(invoices, key=lambda inv: _order_key(inv.created_at, ENTRY_INVOICE, inv.id))
        return latest.customer_name
    if payments:
        latest = max(payments, key=lambda p: _order_key(p.created_at, ENTRY_PAYMENT, p.id))
        return latest.customer_name
    return None


def _facts_for(db: Session, phone: str):
    invoices = db.query(Invoice).filter(Invoice.customer_phone == phone).order_by(Invoice.id).all()
    payments = db.query(CustomerPayment).filter(CustomerPayment.customer_phone == phone).order_by(CustomerPayment.id).all()
    return invoices, payments


def build_ledger(db: Session, phone: str) -> Dict:
    invoices, payments = _facts_for(db, phone)
    if not invoices and not payments:
        raise NotFound(f"No invoices or payments found for customer {phone}")

    history = merge_entries(invoices, payments)
    total_billed = sum((e.debit for e in history), ZERO)
    total_paid = sum((e.credit for e in history), ZERO)
    return {
        "customer_name": _latest_name(invoices, payments),
        "customer_phone": phone,
        "current_balance": history[-1].balance if history else ZERO,
        "total_billed": total_billed,
        "total_paid": total_paid,
        "history": [asdict(e) for e in history],
    }


def list_customers(db: Session) -> List[Dict]:
    """
    Directory of every customer with billed/paid totals.

    Aggregated straight from the invoice and payment tables, without building
    entry-level ledgers. The balance agrees with build_ledger's currentBalance.
    """
    billed_rows = db.query(
        Invoice.customer_phone,
        func.sum(Invoice.total_amount),
        func.count(Invoice.id),
        func.max(Invoice.created_at),
    ).group_by(Invoice.customer_phone).all()
    paid_rows = db.query(
        CustomerPayment.customer_phone,
        func.sum(CustomerPayment.amount_paid),
        func.max(CustomerPayment.created_at),
    ).group_by(CustomerPayment.customer_phone).all()

    customers: Dict[str, Dict] = {}

    def _entry(phone):
        return customers.setdefault(phone, {
            "phone": phone,
            "name": None,
            "total_billed": ZERO,
            "total_paid": ZERO,
            "invoice_count": 0,
            "last_activity": None,
        })

    def _later(a, b):
        if a is None:
            return b
        if b is None:
            return a
        return a if as_local_naive(a) >= as_local_naive(b) else b

    for phone, billed, count, last_at in billed_rows:
        c = _entry(phone)
        c["total_billed"] = money2(billed)
        c["invoice_count"] = count
        c["last_activity"] = _later(c["last_activity"], last_at)
    for phone, paid, last_at in paid_rows:
        c = _entry(phone)
        c["total_paid"] = money2(paid)
        c["last_activity"] = _later(c["last_activity"], last_at)

    # Name comes from the most recent invoice, else the most recent payment
    for phone, name in db.query(CustomerPayment.customer_phone, CustomerPayment.customer_name).order_by(
            CustomerPayment.created_at, CustomerPayment.id):
        customers[phone]["name"] = name
    for phone, name in db.query(Invoice.customer_phone, Invoice.customer_name).order_by(
            Invoice.created_at, Invoice.id):
        customers[phone]["name"] = name

    for c in customers.values():
        c["balance"] = c["total_billed"] - c["total_paid"]

    return sorted(customers.values(), key=lambda c: as_local_naive(c["last_activity"]), reverse=True)


def apply_payment_statuses(db: Session, phone: str) -> None:
    """
    Re-derive invoice payment statuses for one customer.

    Everything the customer has paid is allocated to invoices oldest first in
    ledger order: fully covered invoices are Paid, the next one Partial, the
    rest Pending. Only the status column is touched; amounts never change.
    Does not commit.
    """
    invoices, payments = _facts_for(db, phone)
    remaining = sum((D(p.amount_paid) for p in payments), ZERO)
    if remaining <= 0:
        return

    invoices.sort(key=lambda inv: _order_key(inv.created_at, ENTRY_INVOICE, inv.id))
    for invoice in invoices:
        total = D(invoice.total_amount)
        if remaining >= total:
            new_status = PaymentStatus.PAID
            remaining -= total
        elif remaining > 0:
            new_status = PaymentStatus.PARTIAL
            remaining = ZERO
        else:
            new_status = PaymentStatus.PENDING
        if invoice.payment_status != new_status:
            logger.info(f"Invoice {invoice.invoice_number} payment status {invoice.payment_status.value} -> {new_status.value}")
            invoice.payment_status = new_status


def record_payment(db: Session, payment_in, changed_by: Optional[str] = None) -> CustomerPayment:
    """Append a payment for a known customer and refresh that customer's invoice statuses."""
    # Amounts are stored to the paisa; anything that rounds to zero is rejected
    if payment_in.amount_paid is None or money2(payment_in.amount_paid) <= 0:
        raise ValidationError(["amountPaid: must be at least 0.01"])

    phone = payment_in.customer_phone
    has_invoice = db.query(Invoice.id).filter(Invoice.customer_phone == phone).first()
    has_payment = db.query(CustomerPayment.id).filter(CustomerPayment.customer_phone == phone).first()
    if not has_invoice and not has_payment:
        raise NotFound(f"No invoices or payments found for customer {phone}")

    payment = CustomerPayment(
        customer_phone=phone,
        customer_name=payment_in.customer_name,
        amount_paid=money2(payment_in.amount_paid),
        payment_method=payment_in.payment_method,
        note=payment_in.note,
        created_by=changed_by,
    )
    try:
        db.add(payment)
        db.flush()
        apply_payment_statuses(db, phone)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception(f"Failed to record payment for customer {phone}")
        raise StorageError("Could not record the payment") from e
    db.refresh(payment)
    return payment
