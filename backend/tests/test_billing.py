from decimal import Decimal

import pytest

from conftest import make_item
from models.invoices import Invoice, PaymentMethod, PaymentStatus
from models.stock_item_audit import StockItemAudit
from models.stock_items import StockItem
from services import billing
from services.cart import Cart, build_cart
from services.exceptions import EmptyCart, InsufficientStock, InvalidDiscount


def customer(**overrides):
    values = dict(customer_name="Meera Stores", customer_phone="9876543210", payment_method=PaymentMethod.CASH)
    values.update(overrides)
    return billing.CustomerInfo(**values)


def lookup(db):
    return lambda item_id: db.get(StockItem, item_id)


def test_compute_totals_scenario(db):
    item = make_item(db)
    cart = build_cart(lookup(db), [(item.id, 3)])

    totals = billing.compute_totals(cart)
    assert totals.subtotal == Decimal("750.00")
    assert totals.gst == Decimal("135.00")
    assert totals.discount == Decimal("0.00")
    assert totals.total_amount == Decimal("885.00")


def test_gst_rounds_half_even(db):
    item = make_item(db, packs_per_carton=1, pack_selling_price=Decimal("10.25"))
    cart = build_cart(lookup(db), [(item.id, 1)])

    totals = billing.compute_totals(cart)
    # 10.25 * 0.18 = 1.845
    assert totals.gst == Decimal("1.84")
    assert totals.total_amount == Decimal("12.09")


def test_discount_bounds(db):
    item = make_item(db)
    cart = build_cart(lookup(db), [(item.id, 3)])

    assert billing.compute_totals(cart, Decimal("885.00")).total_amount == Decimal("0.00")
    with pytest.raises(InvalidDiscount):
        billing.compute_totals(cart, Decimal("885.01"))
    with pytest.raises(InvalidDiscount):
        billing.compute_totals(cart, Decimal("-1"))


def test_empty_cart_is_rejected(db):
    with pytest.raises(EmptyCart):
        billing.compute_totals(Cart(lookup(db)))
    with pytest.raises(EmptyCart):
        billing.finalize(db, Cart(lookup(db)), customer())


def test_finalize_creates_invoice_and_takes_stock(db):
    item = make_item(db)
    cart = build_cart(lookup(db), [(item.id, 3)])

    invoice = billing.finalize(db, cart, customer(), changed_by="asha")

    assert invoice.invoice_number == "INV-000001"
    assert invoice.total_amount == Decimal("885.00")
    assert invoice.payment_status == PaymentStatus.PENDING
    assert invoice.created_by == "asha"
    [line] = invoice.items
    assert (line.cartons_ordered, line.pack_price, line.line_total) == (3, Decimal("50.00"), Decimal("750.00"))
    assert line.packaging == "10×5"

    db.expire_all()
    assert db.get(StockItem, item.id).quantity_in_cartons == 17
    audit = db.query(StockItemAudit).filter(StockItemAudit.stock_item_id == item.id).one()
    assert (audit.change_type, audit.change_amount, audit.old_quantity, audit.new_quantity) == ("sale", -3, 20, 17)
    assert audit.note == "Sold via INV-000001"


def test_invoice_numbers_are_sequential(db):
    item = make_item(db)
    first = billing.finalize(db, build_cart(lookup(db), [(item.id, 1)]), customer())
    second = billing.finalize(db, build_cart(lookup(db), [(item.id, 1)]), customer())
    assert (first.invoice_number, second.invoice_number) == ("INV-000001", "INV-000002")


def test_finalize_is_all_or_nothing(db):
    plenty = make_item(db, name="Cotton Roll", quantity_in_cartons=10)
    scarce = make_item(db, name="Insulin Pen", quantity_in_cartons=5)
    cart = build_cart(lookup(db), [(plenty.id, 2), (scarce.id, 4)])

    # Someone else sells the scarce item after the cart was built
    scarce.quantity_in_cartons = 1
    db.commit()

    with pytest.raises(InsufficientStock) as exc:
        billing.finalize(db, cart, customer())
    assert exc.value.item_id == scarce.id

    db.expire_all()
    assert db.get(StockItem, plenty.id).quantity_in_cartons == 10
    assert db.get(StockItem, scarce.id).quantity_in_cartons == 1
    assert db.query(Invoice).count() == 0
    assert db.query(StockItemAudit).count() == 0


def test_failed_invoice_number_is_not_reused(db):
    item = make_item(db, quantity_in_cartons=2)
    cart = build_cart(lookup(db), [(item.id, 2)])
    item.quantity_in_cartons = 0
    db.commit()
    with pytest.raises(InsufficientStock):
        billing.finalize(db, cart, customer())

    item.quantity_in_cartons = 2
    db.commit()
    invoice = billing.finalize(db, build_cart(lookup(db), [(item.id, 1)]), customer())
    assert invoice.invoice_number == "INV-000002"


def test_snapshot_price_is_honoured(db):
    item = make_item(db)
    cart = build_cart(lookup(db), [(item.id, 1)])

    item.pack_selling_price = Decimal("80.00")
    db.commit()

    invoice = billing.finalize(db, cart, customer())
    assert invoice.items[0].pack_price == Decimal("50.00")
    assert invoice.subtotal == Decimal("250.00")


def test_existing_credit_settles_new_invoices(db):
    from services import ledger
    from schemas.payments import PaymentCreate

    item = make_item(db, packs_per_carton=1, pack_selling_price=Decimal("100.00"))

    def sell():
        return billing.finalize(db, build_cart(lookup(db), [(item.id, 1)]), customer())

    first = sell()
    assert first.total_amount == Decimal("118.00")
    ledger.record_payment(db, PaymentCreate(
        customer_phone="9876543210", customer_name="Meera Stores",
        amount_paid=Decimal("300.00"), payment_method=PaymentMethod.UPI,
    ))
    second = sell()
    third = sell()

    db.expire_all()
    statuses = [db.get(Invoice, inv.id).payment_status for inv in (first, second, third)]
    assert statuses == [PaymentStatus.PAID, PaymentStatus.PAID, PaymentStatus.PARTIAL]
