"""
In-memory cart used to build an invoice.

A cart lives for one checkout: it is created when the first line is added and
thrown away on submit or cancel. It is never persisted. Each line keeps the
pack price seen when it was added so the quote does not move while the cart
is being edited.

Availability checks here read the catalog at call time and are advisory only;
the authoritative check happens in stock_guard.commit when the invoice is
finalized.
"""
from collections import OrderedDict
from dataclasses import dataclass
from decimal import Decimal
from typing import Callable, List, Optional

from services.exceptions import InsufficientStock, NotFound, ValidationError
from services.money import D, ZERO


@dataclass
class CartLine:
    stock_item_id: int
    name: str
    packaging: str
    packs_per_carton: int
    pack_price: Decimal
    cartons_ordered: int


def line_total(line: CartLine) -> Decimal:
    return line.pack_price * line.packs_per_carton * line.cartons_ordered


class Cart:
    def __init__(self, lookup: Callable[[int], Optional[object]]):
        # lookup(item_id) -> StockItem or None, read at call time
        self._lookup = lookup
        self._lines: "OrderedDict[int, CartLine]" = OrderedDict()

    @property
    def lines(self) -> List[CartLine]:
        return list(self._lines.values())

    @property
    def is_empty(self) -> bool:
        return not self._lines

    @property
    def subtotal(self) -> Decimal:
        return sum((line_total(line) for line in self._lines.values()), ZERO)

    def get_line(self, item_id: int) -> Optional[CartLine]:
        return self._lines.get(item_id)

    def add_line(self, item, delta: int = 1) -> CartLine:
        if delta < 1:
            raise ValidationError([f"cartonsOrdered must be at least 1 (got {delta})"])

        existing = self._lines.get(item.id)
        requested = (existing.cartons_ordered if existing else 0) + delta
        self._check_available(item, requested)

        if existing:
            existing.cartons_ordered = requested
            return existing

        line = CartLine(
            stock_item_id=item.id,
            name=item.name,
            packaging=item.packaging,
            packs_per_carton=item.packs_per_carton,
            pack_price=D(item.pack_selling_price),
            cartons_ordered=requested,
        )
        self._lines[item.id] = line
        return line

    def set_quantity(self, item_id: int, n: int) -> Optional[CartLine]:
        line = self._lines.get(item_id)
        if line is None:
            raise NotFound(f"Item {item_id} is not in the cart")
        if n <= 0:
            self.remove_line(item_id)
            return None

        item = self._lookup(item_id)
        if item is None:
            raise NotFound(f"Stock item with ID {item_id} not found")
        self._check_available(item, n)
        line.cartons_ordered = n
        return line

    def remove_line(self, item_id: int) -> None:
        self._lines.pop(item_id, None)

    def clear(self) -> None:
        self._lines.clear()

    @staticmethod
    def _check_available(item, requested: int) -> None:
        if requested > item.quantity_in_cartons:
            raise InsufficientStock(item.id, item.name, item.quantity_in_cartons, requested)


def build_cart(lookup, requested_lines) -> Cart:
    """
    Build a cart from (stock_item_id, cartons) pairs as submitted by a client.

    Repeated ids accumulate. Unknown ids raise NotFound.
    """
    cart = Cart(lookup)
    for item_id, cartons in requested_lines:
        item = lookup(item_id)
        if item is None:
            raise NotFound(f"Stock item with ID {item_id} not found")
        cart.add_line(item, cartons)
    return cart
