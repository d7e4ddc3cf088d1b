"""
Domain errors raised by the billing and ledger services.

Routers translate these into HTTP responses; see routers/errors.py.
"""
from typing import List, Optional


class BillingError(Exception):
    """Base class for every error the core raises on purpose."""

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(BillingError):
    def __init__(self, errors: List[str]):
        super().__init__("; ".join(errors))
        self.errors = list(errors)


class InsufficientStock(BillingError):
    def __init__(self, item_id: int, name: Optional[str], available: int, requested: int):
        label = name or f"ID {item_id}"
        super().__init__(
            f"Insufficient stock for item '{label}'. Available: {available}, Requested: {requested}"
        )
        self.item_id = item_id
        self.name = name
        self.available = available
        self.requested = requested


class EmptyCart(BillingError):
    def __init__(self):
        super().__init__("Cart must contain at least one item.")


class InvalidDiscount(BillingError):
    pass


class NotFound(BillingError):
    pass


class ConcurrencyConflict(BillingError):
    """Lost a race on a stock row. Retry the whole cart submission."""
    pass


class StorageError(BillingError):
    pass
