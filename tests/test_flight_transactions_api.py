# tests/test_flight_transactions_api.py
import pytest
from sqlalchemy import insert, select

from backoffice.db import tables
from backoffice.db.core import read_connection, transaction


@pytest.fixture
def flight_booking_id(engine):
    with transaction(engine) as conn:
        result = conn.execute(
            insert(tables.flight_bookings).values(user_id=5, pnr="AB12CD", total_amount=8200)
        )
        return int(result.inserted_primary_key[0])


def _booking(engine, booking_id):
    b = tables.flight_bookings
    with read_connection(engine) as conn:
        return dict(conn.execute(select(b).where(b.c.booking_id == booking_id)).mappings().one())


def test_save_transaction_success_confirms_booking(client, flight_booking_id):
    r = client.post(
        "/api/flight-bookings/save-transaction",
        json={
            "order_id": "FLT-1",
            "booking_id": flight_booking_id,
            "user_id": 5,
            "payment_id": "T2406",
            "payment_amount": 8200,
            "payment_status": "Success",
            "email": "traveller@example.com",
        },
    )
    assert r.status_code == 200, r.text
    assert r.json()["created"] is True

    booking = _booking(client.engine, flight_booking_id)
    assert booking["payment_status"] == "Completed"
    assert booking["booking_status"] == "Confirmed"


def test_save_transaction_is_upsert_by_order_id(client, flight_booking_id):
    body = {
        "order_id": "FLT-2",
        "booking_id": flight_booking_id,
        "payment_amount": 8200,
        "payment_status": "Pending",
    }
    first = client.post("/api/flight-bookings/save-transaction", json=body).json()
    assert first["payment_status"] == "Pending"
    # a Pending result leaves the booking unsettled
    booking = _booking(client.engine, flight_booking_id)
    assert (booking["payment_status"], booking["booking_status"]) == ("Pending", "Pending")

    second = client.post(
        "/api/flight-bookings/save-transaction",
        json=dict(body, payment_status="Success", payment_id="T9"),
    ).json()

    assert second == {
        "transaction_id": first["transaction_id"],
        "created": False,
        "payment_status": "Success",
    }
    rows = client.get("/api/flight-transactions").json()
    assert len(rows) == 1
    assert rows[0]["payment_status"] == "Success"
    assert rows[0]["payment_id"] == "T9"
    assert rows[0]["pnr"] == "AB12CD"
    booking = _booking(client.engine, flight_booking_id)
    assert (booking["payment_status"], booking["booking_status"]) == ("Completed", "Confirmed")


@pytest.mark.parametrize("terminal, retry", [("Success", "Pending"), ("Failed", "Success")])
def test_retry_keeps_terminal_status(client, flight_booking_id, terminal, retry):
    body = {
        "order_id": "FLT-5",
        "booking_id": flight_booking_id,
        "payment_id": "T1",
        "payment_amount": 8200,
        "payment_status": terminal,
    }
    first = client.post("/api/flight-bookings/save-transaction", json=body).json()
    settled = _booking(client.engine, flight_booking_id)

    r = client.post(
        "/api/flight-bookings/save-transaction",
        json=dict(body, payment_status=retry, payment_id="T2"),
    )
    assert r.status_code == 200, r.text
    assert r.json() == {
        "transaction_id": first["transaction_id"],
        "created": False,
        "payment_status": terminal,
    }

    row = client.get(f"/api/flight-transactions/{first['transaction_id']}").json()
    assert row["payment_status"] == terminal
    assert row["payment_id"] == "T1"
    assert _booking(client.engine, flight_booking_id) == settled



def test_save_transaction_unknown_booking(client):
    r = client.post(
        "/api/flight-bookings/save-transaction",
        json={"order_id": "FLT-3", "booking_id": 999, "payment_status": "Success"},
    )
    assert r.status_code == 404
    assert client.get("/api/flight-transactions").json() == []


def test_transaction_detail_and_status(client, flight_booking_id):
    tid = client.post(
        "/api/flight-bookings/save-transaction",
        json={"order_id": "FLT-4", "booking_id": flight_booking_id},
    ).json()["transaction_id"]

    detail = client.get(f"/api/flight-transactions/{tid}").json()
    assert detail["payment_status"] == "Pending"
    assert detail["payment_method"] == "PhonePe"
    assert detail["booking_status"] == "Pending"

    r = client.put(f"/api/flight-transactions/{tid}/status", json={"status": "Failed"})
    assert r.status_code == 200
    assert r.json()["payment_status"] == "Failed"
    assert r.json()["booking_status"] == "Failed"

    # same terminal status again is accepted, any other change is refused
    r = client.put(f"/api/flight-transactions/{tid}/status", json={"status": "Failed"})
    assert r.status_code == 200
    r = client.put(f"/api/flight-transactions/{tid}/status", json={"status": "Pending"})
    assert r.status_code == 400
    assert "Failed" in r.json()["detail"]
    assert client.get(f"/api/flight-transactions/{tid}").json()["payment_status"] == "Failed"

    assert client.get("/api/flight-transactions/999").status_code == 404
    assert (
        client.put("/api/flight-transactions/999/status", json={"status": "Failed"}).status_code
        == 404
    )

