# tests/test_checkout_api.py
from sqlalchemy import select, update

from backoffice.db import tables
from backoffice.db.core import read_connection, transaction


def _checkout_body(**overrides):
    body = {
        "tour_id": 11,
        "tour_code": "EUR-14",
        "tour_title": "Europe Highlights",
        "total_tour_cost": 250000,
        "advance_amount": 50000,
        "first_name": "Asha",
        "email": "asha@example.com",
        "phone": "9800000000",
        "terms_accepted": True,
    }
    body.update(overrides)
    return body


def _payments(engine):
    with read_connection(engine) as conn:
        return [dict(r) for r in conn.execute(select(tables.payments)).mappings().all()]


def test_create_checkout_with_pending_payment(client):
    """(happy path) checkout + one Pending payment for the advance amount"""
    r = client.post("/api/checkout", json=_checkout_body())
    assert r.status_code == 201, r.text
    data = r.json()

    assert data["payment_status"] == "pending"
    assert data["advance_percentage"] == 20
    assert data["country"] == "India"
    assert len(data["payments"]) == 1
    payment = data["payments"][0]
    assert payment["amount"] == 50000
    assert payment["status"] == "Pending"
    assert payment["order_id"] is None
    assert payment["payment_gateway"] == "PhonePe"


def test_create_checkout_validation(client):
    body = _checkout_body()
    del body["advance_amount"]
    assert client.post("/api/checkout", json=body).status_code == 422
    assert _payments(client.engine) == []


def test_patch_contact_fields(client):
    checkout_id = client.post("/api/checkout", json=_checkout_body()).json()["checkout_id"]

    r = client.patch(f"/api/checkout/{checkout_id}", json={"city": "Pune", "last_name": "Rao"})
    assert r.status_code == 200, r.text
    assert r.json()["city"] == "Pune"
    assert r.json()["last_name"] == "Rao"


def test_patch_rejects_non_contact_fields(client):
    """(error) amounts / status are not reachable through PATCH"""
    checkout_id = client.post("/api/checkout", json=_checkout_body()).json()["checkout_id"]

    r = client.patch(
        f"/api/checkout/{checkout_id}",
        json={"city": "Pune", "advance_amount": 1},
    )
    assert r.status_code == 400
    assert "advance_amount" in r.json()["detail"]

    data = client.get(f"/api/checkout/{checkout_id}").json()
    assert data["advance_amount"] == 50000
    assert data["city"] == ""

    assert client.patch(f"/api/checkout/{checkout_id}", json={"city": None}).status_code == 400
    assert client.patch("/api/checkout/999", json={"city": "Pune"}).status_code == 404


def test_update_status(client):
    checkout_id = client.post("/api/checkout", json=_checkout_body()).json()["checkout_id"]

    r = client.put(f"/api/checkout/{checkout_id}/status", json={"payment_status": "failed"})
    assert r.status_code == 200
    assert r.json()["payment_status"] == "failed"

    r = client.put(f"/api/checkout/{checkout_id}/status", json={"payment_status": "refunded"})
    assert r.status_code == 422


def test_list_by_tour(client):
    a = client.post("/api/checkout", json=_checkout_body()).json()["checkout_id"]
    b = client.post("/api/checkout", json=_checkout_body()).json()["checkout_id"]
    client.post("/api/checkout", json=_checkout_body(tour_id=12))

    rows = client.get("/api/checkout/tour/11").json()
    assert [row["checkout_id"] for row in rows] == [b, a]


def test_completed_requires_success_payment(client):
    """(error) no Success payment row -> completed is refused and nothing changes"""
    checkout_id = client.post("/api/checkout", json=_checkout_body()).json()["checkout_id"]

    r = client.put(f"/api/checkout/{checkout_id}/status", json={"payment_status": "completed"})
    assert r.status_code == 400
    assert "Success" in r.json()["detail"]

    data = client.get(f"/api/checkout/{checkout_id}").json()
    assert data["payment_status"] == "pending"
    assert [p["status"] for p in data["payments"]] == ["Pending"]


def test_completed_checkout_keeps_its_status(client):
    checkout_id = client.post("/api/checkout", json=_checkout_body()).json()["checkout_id"]
    with transaction(client.engine) as conn:
        conn.execute(
            update(tables.payments)
            .where(tables.payments.c.checkout_id == checkout_id)
            .values(status="Success", order_id="ORD-1")
        )

    r = client.put(f"/api/checkout/{checkout_id}/status", json={"payment_status": "completed"})
    assert r.status_code == 200, r.text
    assert r.json()["payment_status"] == "completed"

    # re-marking completed is accepted, moving away from it is not
    r = client.put(f"/api/checkout/{checkout_id}/status", json={"payment_status": "completed"})
    assert r.status_code == 200
    for status in ("pending", "failed"):
        r = client.put(f"/api/checkout/{checkout_id}/status", json={"payment_status": status})
        assert r.status_code == 400
    assert client.get(f"/api/checkout/{checkout_id}").json()["payment_status"] == "completed"

    r = client.put("/api/checkout/999/status", json={"payment_status": "failed"})
    assert r.status_code == 404
