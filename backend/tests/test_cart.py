from decimal import Decimal
from types import SimpleNamespace

import pytest

from services.cart import Cart, build_cart, line_total
from services.exceptions import InsufficientStock, NotFound, ValidationError


def stock(item_id=1, qty=20, price="50.00", packs=5, units=10, name="Paracetamol 500mg"):
    return SimpleNamespace(
        id=item_id,
        name=name,
        packaging=f"{units}×{packs}",
        packs_per_carton=packs,
        pack_selling_price=Decimal(price),
        quantity_in_cartons=qty,
    )


@pytest.fixture
def catalog():
    items = {1: stock(), 2: stock(item_id=2, qty=4, price="12.50", packs=12, name="ORS Sachet")}
    return items


@pytest.fixture
def cart(catalog):
    return Cart(catalog.get)


def test_line_total_uses_packaging(cart, catalog):
    line = cart.add_line(catalog[1], 3)
    assert line_total(line) == Decimal("750.00")
    assert line.packaging == "10×5"
    assert cart.subtotal == Decimal("750.00")


def test_add_existing_line_accumulates(cart, catalog):
    cart.add_line(catalog[1])
    cart.add_line(catalog[1], 2)
    assert len(cart.lines) == 1
    assert cart.get_line(1).cartons_ordered == 3


def test_add_beyond_stock_raises_and_leaves_cart_unchanged(cart, catalog):
    cart.add_line(catalog[2], 3)
    with pytest.raises(InsufficientStock) as exc:
        cart.add_line(catalog[2], 2)
    assert exc.value.available == 4
    assert exc.value.requested == 5
    assert cart.get_line(2).cartons_ordered == 3


def test_add_requires_positive_delta(cart, catalog):
    with pytest.raises(ValidationError):
        cart.add_line(catalog[1], 0)
    assert cart.is_empty


def test_set_quantity_revalidates_against_current_stock(cart, catalog):
    cart.add_line(catalog[1], 2)
    catalog[1].quantity_in_cartons = 5
    with pytest.raises(InsufficientStock):
        cart.set_quantity(1, 6)
    cart.set_quantity(1, 5)
    assert cart.get_line(1).cartons_ordered == 5


def test_set_quantity_zero_removes_line(cart, catalog):
    cart.add_line(catalog[1], 2)
    assert cart.set_quantity(1, 0) is None
    assert cart.is_empty


def test_set_quantity_unknown_line(cart):
    with pytest.raises(NotFound):
        cart.set_quantity(99, 1)


def test_price_is_snapshotted_when_added(cart, catalog):
    cart.add_line(catalog[1], 1)
    catalog[1].pack_selling_price = Decimal("65.00")
    assert cart.get_line(1).pack_price == Decimal("50.00")
    assert cart.subtotal == Decimal("250.00")


def test_remove_and_clear(cart, catalog):
    cart.add_line(catalog[1])
    cart.add_line(catalog[2])
    cart.remove_line(1)
    assert [line.stock_item_id for line in cart.lines] == [2]
    cart.clear()
    assert cart.is_empty
    assert cart.subtotal == Decimal("0")


def test_build_cart_accumulates_duplicate_ids(catalog):
    cart = build_cart(catalog.get, [(1, 2), (2, 1), (1, 3)])
    assert [(line.stock_item_id, line.cartons_ordered) for line in cart.lines] == [(1, 5), (2, 1)]


def test_build_cart_unknown_item(catalog):
    with pytest.raises(NotFound):
        build_cart(catalog.get, [(42, 1)])
