from decimal import Decimal
from types import SimpleNamespace

import pytest

from conftest import local_dt, make_invoice, make_payment
from models.invoices import Invoice, PaymentMethod, PaymentStatus
from schemas.payments import PaymentCreate
from services import ledger
from services.exceptions import NotFound, ValidationError

PHONE = "9876543210"


def test_running_balance(db):
    make_invoice(db, total="885.00", created_at=local_dt(2026, 1, 5), number="INV-000001")
    make_payment(db, amount="500.00", created_at=local_dt(2026, 1, 6), note="part payment")

    result = ledger.build_ledger(db, PHONE)

    assert [e["balance"] for e in result["history"]] == [Decimal("885.00"), Decimal("385.00")]
    assert result["current_balance"] == Decimal("385.00")
    assert result["total_billed"] == Decimal("885.00")
    assert result["total_paid"] == Decimal("500.00")
    invoice_entry, payment_entry = result["history"]
    assert (invoice_entry["type"], invoice_entry["description"], invoice_entry["reference"]) == (
        "Invoice", "Invoice INV-000001", "INV-000001")
    assert payment_entry["description"] == "Payment (UPI) - part payment"


def test_order_follows_timestamps_not_insertion(db):
    # Payment row inserted first but stamped later
    make_payment(db, amount="100.00", created_at=local_dt(2026, 1, 9))
    make_invoice(db, total="300.00", created_at=local_dt(2026, 1, 2))
    make_invoice(db, total="50.00", created_at=local_dt(2026, 1, 12))

    result = ledger.build_ledger(db, PHONE)

    assert [e["type"] for e in result["history"]] == ["Invoice", "Payment", "Invoice"]
    assert [e["balance"] for e in result["history"]] == [Decimal("300.00"), Decimal("200.00"), Decimal("250.00")]
    assert result["current_balance"] == Decimal("250.00")


def test_invoice_sorts_before_payment_at_same_instant(db):
    stamp = local_dt(2026, 2, 1, 12, 30)
    make_payment(db, amount="200.00", created_at=stamp)
    make_invoice(db, total="200.00", created_at=stamp)

    history = ledger.build_ledger(db, PHONE)["history"]

    assert [e["type"] for e in history] == ["Invoice", "Payment"]
    assert [e["balance"] for e in history] == [Decimal("200.00"), Decimal("0.00")]


def test_same_kind_at_same_instant_keeps_creation_order(db):
    stamp = local_dt(2026, 2, 1, 12, 30)
    first_payment = make_payment(db, amount="30.00", created_at=stamp)
    first_invoice = make_invoice(db, total="100.00", created_at=stamp)
    second_payment = make_payment(db, amount="20.00", created_at=stamp)
    second_invoice = make_invoice(db, total="50.00", created_at=stamp)

    history = ledger.build_ledger(db, PHONE)["history"]

    assert [e["reference"] for e in history] == [
        first_invoice.invoice_number, second_invoice.invoice_number,
        str(first_payment.id), str(second_payment.id),
    ]
    assert [e["balance"] for e in history] == [
        Decimal("100.00"), Decimal("150.00"), Decimal("120.00"), Decimal("100.00")]
    assert ledger.build_ledger(db, PHONE)["history"] == history


def test_build_ledger_is_idempotent(db):
    make_invoice(db, total="885.00")
    make_payment(db, amount="500.00")
    assert ledger.build_ledger(db, PHONE) == ledger.build_ledger(db, PHONE)


def test_unknown_customer(db):
    with pytest.raises(NotFound):
        ledger.build_ledger(db, "9000000000")


def test_merge_entries_is_pure():
    invoices = [SimpleNamespace(id=1, created_at=local_dt(2026, 1, 1), invoice_number="INV-1", total_amount=Decimal("10"))]
    payments = [SimpleNamespace(id=7, created_at=local_dt(2026, 1, 1), amount_paid=Decimal("4"),
                                payment_method=PaymentMethod.CASH, note=None)]
    entries = ledger.merge_entries(invoices, payments)
    assert [(e.type, e.balance) for e in entries] == [("Invoice", Decimal("10.00")), ("Payment", Decimal("6.00"))]
    assert entries[1].reference == "7"


def test_customer_directory_matches_ledgers(db):
    make_invoice(db, phone=PHONE, total="885.00", created_at=local_dt(2026, 1, 5))
    make_payment(db, phone=PHONE, amount="500.00", created_at=local_dt(2026, 1, 6))
    make_invoice(db, phone="9123456780", total="120.50", created_at=local_dt(2026, 1, 3), name="City Clinic")
    make_invoice(db, phone="9123456780", total="79.50", created_at=local_dt(2026, 1, 8), name="City Clinic Pvt")
    make_payment(db, phone="9988776655", amount="40.00", created_at=local_dt(2026, 1, 7), name="Walk-in")

    customers = ledger.list_customers(db)

    assert [c["phone"] for c in customers] == ["9123456780", "9988776655", PHONE]
    for c in customers:
        assert c["balance"] == ledger.build_ledger(db, c["phone"])["current_balance"]
    clinic = customers[0]
    assert clinic["name"] == "City Clinic Pvt"
    assert clinic["invoice_count"] == 2
    assert clinic["total_billed"] == Decimal("200.00")
    assert customers[1]["balance"] == Decimal("-40.00")


def test_payment_statuses_follow_allocation(db):
    first = make_invoice(db, total="100.00", created_at=local_dt(2026, 1, 1))
    second = make_invoice(db, total="100.00", created_at=local_dt(2026, 1, 2))
    third = make_invoice(db, total="100.00", created_at=local_dt(2026, 1, 3))
    make_payment(db, amount="150.00", created_at=local_dt(2026, 1, 4))

    ledger.apply_payment_statuses(db, PHONE)
    db.commit()

    db.expire_all()
    assert [db.get(Invoice, inv.id).payment_status for inv in (first, second, third)] == [
        PaymentStatus.PAID, PaymentStatus.PARTIAL, PaymentStatus.PENDING]


def test_record_payment(db):
    invoice = make_invoice(db, total="885.00")

    payment = ledger.record_payment(db, PaymentCreate(
        customer_phone=PHONE, customer_name="Meera Stores",
        amount_paid=Decimal("885.00"), payment_method=PaymentMethod.CARD,
    ), changed_by="ravi")

    assert payment.id is not None
    assert payment.created_by == "ravi"
    db.expire_all()
    assert db.get(Invoice, invoice.id).payment_status == PaymentStatus.PAID
    assert ledger.build_ledger(db, PHONE)["current_balance"] == Decimal("0.00")


def test_record_payment_for_unknown_customer(db):
    with pytest.raises(NotFound):
        ledger.record_payment(db, PaymentCreate(
            customer_phone="9000000000", customer_name="Nobody",
            amount_paid=Decimal("10"), payment_method=PaymentMethod.CASH,
        ))


def test_record_payment_rejects_non_positive_amount(db):
    make_invoice(db)
    payment_in = SimpleNamespace(customer_phone=PHONE, customer_name="Meera Stores",
                                 amount_paid=Decimal("0"), payment_method=PaymentMethod.CASH, note=None)
    with pytest.raises(ValidationError):
        ledger.record_payment(db, payment_in)
