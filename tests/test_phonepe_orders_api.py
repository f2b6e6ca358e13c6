# tests/test_phonepe_orders_api.py
import pytest
from sqlalchemy import select

from backoffice.common.errors import GatewayError
from backoffice.db import tables
from backoffice.db.core import read_connection

RETURN_URL = "https://sktours.example/payment-result"


@pytest.fixture(autouse=True)
def phonepe_env(monkeypatch):
    monkeypatch.setenv("PHONEPE_CLIENT_ID_TEST", "TEST-ID")
    monkeypatch.setenv("PHONEPE_CLIENT_SECRET_TEST", "test-secret")
    monkeypatch.delenv("PAYMENT_ENV", raising=False)


@pytest.fixture
def checkout_id(client):
    r = client.post(
        "/api/checkout",
        json={"tour_id": 3, "total_tour_cost": 2500, "advance_amount": 500},
    )
    assert r.status_code == 201, r.text
    return r.json()["checkout_id"]


def _payment_status(engine, order_id):
    p = tables.payments
    with read_connection(engine) as conn:
        return conn.execute(select(p.c.status).where(p.c.order_id == order_id)).scalar_one()


def test_create_order_then_check_status(client, checkout_id):
    r = client.post(
        "/api/phonepe/orders",
        json={
            "action": "create-order",
            "amount": 500.00,
            "currency": "INR",
            "merchantOrderId": "ORD-API-1",
            "customerDetails": {"checkout_id": checkout_id},
            "returnUrl": RETURN_URL,
        },
    )
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["success"] is True
    assert data["action"] == "order-created"
    assert data["merchantOrderId"] == "ORD-API-1"
    assert data["checkoutPageUrl"].endswith("/ORD-API-1")
    assert data["environment"] == "test"
    assert client.gateway.pay_calls[0]["amount_minor"] == 50000
    assert client.gateway.configs[0].client_id == "TEST-ID"

    checkout = client.get(f"/api/checkout/{checkout_id}").json()
    assert checkout["payment_status"] == "processing"

    client.gateway.states = ["COMPLETED"]
    r = client.post(
        "/api/phonepe/orders",
        json={"action": "check-status", "merchantOrderId": "ORD-API-1"},
    )
    assert r.status_code == 200, r.text
    assert r.json()["status"] == "Success"
    assert r.json()["gatewayState"] == "COMPLETED"
    assert _payment_status(client.engine, "ORD-API-1") == "Success"
    assert client.get(f"/api/checkout/{checkout_id}").json()["payment_status"] == "completed"


def test_unknown_action_is_400(client):
    r = client.post("/api/phonepe/orders", json={"action": "set-environment"})
    assert r.status_code == 400


def test_create_order_requires_return_url(client, checkout_id):
    r = client.post(
        "/api/phonepe/orders",
        json={"action": "create-order", "amount": 500, "checkoutId": checkout_id},
    )
    assert r.status_code == 400
    assert client.gateway.pay_calls == []


def test_create_order_requires_amount(client, checkout_id):
    r = client.post(
        "/api/phonepe/orders",
        json={"action": "create-order", "checkoutId": checkout_id, "returnUrl": RETURN_URL},
    )
    assert r.status_code == 400


@pytest.mark.parametrize("amount", ["1e30", 1e30])
def test_create_order_rejects_oversized_amount(client, checkout_id, amount):
    r = client.post(
        "/api/phonepe/orders",
        json={
            "action": "create-order",
            "amount": amount,
            "checkoutId": checkout_id,
            "returnUrl": RETURN_URL,
        },
    )
    assert r.status_code == 400
    assert "amount" in r.json()["detail"]
    assert client.gateway.pay_calls == []


def test_check_status_unknown_order_is_404(client):
    r = client.post(
        "/api/phonepe/orders",
        json={"action": "check-status", "merchantOrderId": "MISSING"},
    )
    assert r.status_code == 404


def test_gateway_error_is_502(client, checkout_id):
    client.gateway.error = GatewayError("PhonePe pay answered HTTP 500")
    r = client.post(
        "/api/phonepe/orders",
        json={
            "action": "create-order",
            "amount": "500",
            "checkoutId": checkout_id,
            "merchantOrderId": "ORD-502",
            "returnUrl": RETURN_URL,
        },
    )
    assert r.status_code == 502
    with read_connection(client.engine) as conn:
        ids = conn.execute(select(tables.payments.c.order_id)).scalars().all()
    assert ids == [None]


def test_environment_endpoint(client):
    r = client.get("/api/phonepe/environment")
    assert r.status_code == 200
    data = r.json()
    assert data["environment"] == "test"
    assert data["clientId"] == "TEST-ID"
    assert data["gatewayEnv"] == "SANDBOX"
    assert "test-secret" not in r.text

    assert client.get("/api/phonepe/environment?environment=bogus").status_code == 400
