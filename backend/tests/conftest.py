"""
Pytest configuration and fixtures.

The application reads its settings at import time, so the environment is
pointed at a throwaway SQLite file before anything from the app is imported.
"""
import os
import tempfile
from datetime import date, datetime, timedelta
from decimal import Decimal

_TMP_DIR = tempfile.mkdtemp(prefix="medstock-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{os.path.join(_TMP_DIR, 'test.db')}"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["AUTH_SECRET_KEY"] = "test-secret"
os.environ["AUTH_ALGORITHM"] = "HS256"
os.environ["ENABLE_SCHEDULER"] = "false"
os.environ["GST_RATE"] = "0.18"

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from main import app
from database import Base, SessionLocal, engine, get_db
from models.customer_payments import CustomerPayment
from models.invoice_items import InvoiceItem
from models.invoices import Invoice, PaymentMethod, PaymentStatus
from models.stock_items import StockCategory, StockItem
from services.money import money2
from utils.date_utils import APP_TZ, today_local


@pytest.fixture(autouse=True)
def reset_database():
    """Every test starts from empty tables."""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db():
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def client():
    def override_get_db():
        session = SessionLocal()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


def make_token(role="admin", username="asha", sub="user-1"):
    return jwt.encode({"sub": sub, "username": username, "role": role}, "test-secret", algorithm="HS256")


@pytest.fixture
def admin_headers():
    return {"Authorization": f"Bearer {make_token('admin')}"}


@pytest.fixture
def staff_headers():
    return {"Authorization": f"Bearer {make_token('staff', username='ravi', sub='user-2')}"}


def local_dt(year, month, day, hour=10, minute=0, second=0):
    """Aware timestamp in the application timezone."""
    return APP_TZ.localize(datetime(year, month, day, hour, minute, second))


def make_item(db, **overrides):
    values = dict(
        name="Paracetamol 500mg",
        category=StockCategory.MEDICINE,
        manufacturer="Cipla",
        batch_number="B-1001",
        units_per_pack=10,
        packs_per_carton=5,
        quantity_in_cartons=20,
        pack_cost_price=Decimal("40.00"),
        pack_selling_price=Decimal("50.00"),
        expiry_date=today_local() + timedelta(days=365),
        reorder_level=2,
    )
    values.update(overrides)
    item = StockItem(**values)
    db.add(item)
    db.commit()
    db.refresh(item)
    return item


def make_invoice(db, phone="9876543210", total="885.00", created_at=None, name="Meera Stores",
                 number=None, lines=(), status=PaymentStatus.PENDING):
    """Insert an invoice row directly, bypassing stock. `lines` is a list of (item, cartons)."""
    created_at = created_at or local_dt(2026, 1, 5)
    count = db.query(Invoice).count()
    invoice = Invoice(
        invoice_number=number or f"T-{count + 1:04d}",
        customer_name=name,
        customer_phone=phone,
        subtotal=money2(total),
        gst=Decimal("0.00"),
        discount=Decimal("0.00"),
        total_amount=money2(total),
        payment_method=PaymentMethod.CASH,
        payment_status=status,
        created_at=created_at,
    )
    for item, cartons in lines:
        invoice.items.append(InvoiceItem(
            stock_item_id=item.id,
            name=item.name,
            packaging=item.packaging,
            cartons_ordered=cartons,
            packs_per_carton=item.packs_per_carton,
            pack_price=item.pack_selling_price,
            line_total=money2(item.pack_selling_price * item.packs_per_carton * cartons),
        ))
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


def make_payment(db, phone="9876543210", amount="500.00", created_at=None, name="Meera Stores",
                 method=PaymentMethod.UPI, note=None):
    payment = CustomerPayment(
        customer_phone=phone,
        customer_name=name,
        amount_paid=money2(amount),
        payment_method=method,
        note=note,
        created_at=created_at or local_dt(2026, 1, 6),
    )
    db.add(payment)
    db.commit()
    db.refresh(payment)
    return payment


def stock_payload(**overrides):
    payload = {
        "name": "Surgical Gloves",
        "category": "Surgical",
        "manufacturer": "Ansell",
        "batchNumber": "GL-77",
        "unitsPerPack": 100,
        "packsPerCarton": 10,
        "quantityInCartons": 12,
        "packCostPrice": "180.00",
        "packSellingPrice": "240.00",
        "manufacturingDate": "2026-01-01",
        "expiryDate": (today_local() + timedelta(days=400)).isoformat(),
        "reorderLevel": 3,
        "location": "Rack A2",
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def fixed_today():
    return date(2026, 3, 10)
