from datetime import datetime
from decimal import Decimal

from banquet import models
from banquet.models.invoice import InvoiceStatus
from banquet.models.service_order import ServiceOrderStatus
from helpers import ADMIN, OTHER_PROVIDER, OTHER_USER, PROVIDER, USER

BASE = "/api/service-provider"


def add_invoice(db, status=InvoiceStatus.PENDING) -> models.Invoice:
    invoice = models.Invoice(
        service_provider_id="provider-1",
        user_id="user-1",
        customer_name="Ada",
        customer_email="ada@example.com",
        total_amount=Decimal("250.00"),
        status=status,
        due_date=datetime(2026, 6, 8, 12, 0),
        items=[models.InvoiceItem(item_name="Cake", quantity=1, unit_price=Decimal("250.00"))],
    )
    db.add(invoice)
    db.commit()
    db.refresh(invoice)
    return invoice


def _pay(client, invoice_id, headers=ADMIN, reference="pi_123"):
    return client.post(f"{BASE}/invoices/{invoice_id}/pay", json={"paymentReference": reference}, headers=headers)


def test_parties_read_invoice(client, db):
    invoice = add_invoice(db)
    assert client.get(f"{BASE}/invoices/{invoice.id}", headers=USER).status_code == 200
    assert client.get(f"{BASE}/invoices/{invoice.id}", headers=PROVIDER).status_code == 200
    assert client.get(f"{BASE}/invoices/{invoice.id}", headers=OTHER_USER).status_code == 403
    assert client.get(f"{BASE}/invoices/{invoice.id}", headers=OTHER_PROVIDER).status_code == 403
    assert client.get(f"{BASE}/invoices/404", headers=ADMIN).status_code == 404


def test_payment_opens_service_order(client, db):
    invoice = add_invoice(db)
    res = _pay(client, invoice.id)
    assert res.status_code == 200, res.text
    body = res.json()
    assert body["invoice"]["status"] == "paid"
    assert body["invoice"]["paymentReference"] == "pi_123"
    assert body["invoice"]["paidAt"].startswith("2026-06-01T12:00:00")
    assert body["serviceOrder"]["status"] == "confirmed"
    assert body["serviceOrder"]["invoiceId"] == invoice.id
    assert body["serviceOrder"]["userId"] == "user-1"


def test_only_admin_records_payment(client, db):
    invoice = add_invoice(db)
    assert _pay(client, invoice.id, headers=USER).status_code == 403
    assert _pay(client, invoice.id, headers=PROVIDER).status_code == 403
    assert db.query(models.ServiceOrder).count() == 0


def test_paying_twice_conflicts(client, db):
    invoice = add_invoice(db)
    assert _pay(client, invoice.id).status_code == 200
    res = _pay(client, invoice.id)
    assert res.status_code == 409
    assert res.json()["details"]["currentStatus"] == "paid"
    assert db.query(models.ServiceOrder).count() == 1


def test_overdue_invoice_can_still_be_paid(client, db):
    invoice = add_invoice(db, status=InvoiceStatus.OVERDUE)
    assert _pay(client, invoice.id).status_code == 200


def test_cancel_invoice(client, db):
    invoice = add_invoice(db)
    assert client.post(f"{BASE}/invoices/{invoice.id}/cancel", headers=USER).status_code == 403
    res = client.post(f"{BASE}/invoices/{invoice.id}/cancel", headers=PROVIDER)
    assert res.status_code == 200
    assert res.json()["status"] == "cancelled"
    assert _pay(client, invoice.id).status_code == 409


def test_service_order_progression(client, db):
    invoice = add_invoice(db)
    order_id = _pay(client, invoice.id).json()["serviceOrder"]["id"]
    url = f"{BASE}/service-orders/{order_id}/status"

    assert client.put(url, json={"status": "in_progress"}, headers=USER).status_code == 403
    res = client.put(url, json={"status": "completed"}, headers=PROVIDER)
    assert res.status_code == 409

    res = client.put(url, json={"status": "in_progress"}, headers=PROVIDER)
    assert res.status_code == 200
    assert res.json()["status"] == "in_progress"
    res = client.put(url, json={"status": "completed"}, headers=PROVIDER)
    assert res.json()["status"] == "completed"

    res = client.put(url, json={"status": "cancelled"}, headers=ADMIN)
    assert res.status_code == 409
    assert client.put(url, json={"status": "shipped"}, headers=ADMIN).status_code == 400

    order = db.get(models.ServiceOrder, order_id)
    assert order.status == ServiceOrderStatus.COMPLETED


def test_service_order_visible_to_parties_only(client, db):
    invoice = add_invoice(db)
    order_id = _pay(client, invoice.id).json()["serviceOrder"]["id"]
    assert client.get(f"{BASE}/service-orders/{order_id}", headers=USER).status_code == 200
    assert client.get(f"{BASE}/service-orders/{order_id}", headers=OTHER_USER).status_code == 403


def test_invoice_list_scoping(client, db):
    add_invoice(db)
    add_invoice(db)
    assert client.get(f"{BASE}/invoices", headers=USER).json()["pagination"]["total"] == 2
    assert client.get(f"{BASE}/invoices", headers=OTHER_PROVIDER).json()["pagination"]["total"] == 0
    body = client.get(f"{BASE}/invoices?limit=1", headers=ADMIN).json()
    assert body["pagination"] == {"total": 2, "page": 1, "limit": 1, "pages": 2}
    assert len(body["invoices"]) == 1
