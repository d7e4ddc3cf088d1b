from decimal import Decimal

from conftest import make_item

PHONE = "9876543210"


def payment(amount="500.00", **overrides):
    body = {
        "customerPhone": PHONE,
        "customerName": "Meera Stores",
        "amountPaid": amount,
        "paymentMethod": "UPI",
        "note": "part payment",
    }
    body.update(overrides)
    return body


def create_invoice(client, headers, item_id, cartons=3):
    response = client.post("/api/billing", headers=headers, json={
        "customerName": "Meera Stores",
        "customerPhone": PHONE,
        "paymentMethod": "Cash",
        "items": [{"stockId": item_id, "cartonsOrdered": cartons}],
    })
    assert response.status_code == 201
    return response.json()


def test_ledger_after_invoice_and_payment(client, admin_headers, db):
    item = make_item(db)
    invoice = create_invoice(client, admin_headers, item.id)

    response = client.post("/api/payments", json=payment(), headers=admin_headers)
    assert response.status_code == 201
    assert response.json()["createdBy"] == "asha"

    ledger = client.get(f"/api/payments/customer/{PHONE}").json()
    assert ledger["customerName"] == "Meera Stores"
    assert Decimal(ledger["currentBalance"]) == Decimal("385.00")
    assert [Decimal(e["balance"]) for e in ledger["history"]] == [Decimal("885.00"), Decimal("385.00")]
    assert [e["type"] for e in ledger["history"]] == ["Invoice", "Payment"]

    status = client.get(f"/api/billing/{invoice['id']}").json()["paymentStatus"]
    assert status == "Partial"


def test_full_payment_marks_invoice_paid(client, admin_headers, db):
    item = make_item(db)
    invoice = create_invoice(client, admin_headers, item.id)
    client.post("/api/payments", json=payment("885.00"), headers=admin_headers)
    assert client.get(f"/api/billing/{invoice['id']}").json()["paymentStatus"] == "Paid"


def test_payment_validation(client, admin_headers, db):
    assert client.post("/api/payments", json=payment()).status_code == 401
    assert client.post("/api/payments", json=payment("0"), headers=admin_headers).status_code == 422
    assert client.post("/api/payments", json=payment("-10"), headers=admin_headers).status_code == 422
    assert client.post("/api/payments", json=payment(customerPhone="12345"), headers=admin_headers).status_code == 422
    # no invoices or payments on file for this phone
    assert client.post("/api/payments", json=payment(), headers=admin_headers).status_code == 404


def test_customer_directory(client, admin_headers, db):
    item = make_item(db, quantity_in_cartons=50)
    create_invoice(client, admin_headers, item.id)
    client.post("/api/payments", json=payment(), headers=admin_headers)

    customers = client.get("/api/payments/customers").json()
    assert len(customers) == 1
    [customer] = customers
    assert customer["phone"] == PHONE
    assert customer["invoiceCount"] == 1
    assert Decimal(customer["totalBilled"]) == Decimal("885.00")
    assert Decimal(customer["totalPaid"]) == Decimal("500.00")
    assert Decimal(customer["balance"]) == Decimal("385.00")


def test_unknown_customer_ledger(client):
    assert client.get("/api/payments/customer/9000000000").status_code == 404


def test_record_payment_requires_admin(client, admin_headers, staff_headers, db):
    item = make_item(db)
    create_invoice(client, admin_headers, item.id)

    assert client.post("/api/payments", json=payment(), headers=staff_headers).status_code == 403
    assert Decimal(client.get(f"/api/payments/customer/{PHONE}").json()["currentBalance"]) == Decimal("885.00")


def test_amount_rounding_to_zero_is_rejected(client, admin_headers, db):
    item = make_item(db)
    create_invoice(client, admin_headers, item.id)

    for amount in ("0.004", "0.005"):
        response = client.post("/api/payments", json=payment(amount), headers=admin_headers)
        assert response.status_code == 400
        assert response.json()["detail"] == ["amountPaid: must be at least 0.01"]

    ledger = client.get(f"/api/payments/customer/{PHONE}").json()
    assert [e["type"] for e in ledger["history"]] == ["Invoice"]

    assert client.post("/api/payments", json=payment("0.01"), headers=admin_headers).status_code == 201
