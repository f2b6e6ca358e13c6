# tests/test_tour_booking_api.py
import re

from sqlalchemy import text

from backoffice.db.core import read_connection
from backoffice.tour_booking.services.tour_booking_service import generate_booking_ref


def _count(engine, table):
    with read_connection(engine) as conn:
        return conn.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar_one()


def _passenger(first_name, passenger_type="adult", passport_no=None):
    return {
        "first_name": first_name,
        "last_name": "Sharma",
        "gender": "F",
        "date_of_birth": "1990-04-01",
        "passenger_type": passenger_type,
        "passport_no": passport_no,
    }


def _booking(passengers, **overrides):
    body = {
        "customer_id": 42,
        "departure_id": 7,
        "total_adult": 2,
        "total_child": 1,
        "total_infant": 0,
        "total_amount": 150000.0,
        "passengers": passengers,
    }
    body.update(overrides)
    return body


def test_generate_booking_ref_shape():
    ref = generate_booking_ref(now_ms=1718000000000)
    assert re.fullmatch(r"KES1718000000000\d{3}", ref)


def test_create_booking_with_passengers(client):
    """(happy path) 2 adults + 1 child -> one booking, three passenger rows"""
    r = client.post(
        "/api/bookings",
        json=_booking(
            [
                _passenger("Asha", passport_no="P1"),
                _passenger("Ravi", passport_no="P2"),
                _passenger("Mira", passenger_type="child", passport_no="P3"),
            ]
        ),
    )
    assert r.status_code == 201, r.text
    data = r.json()

    assert re.fullmatch(r"^[A-Z]{3}\d+$", data["booking_ref"])
    assert data["passengers"] == 3
    assert _count(client.engine, "tour_bookings") == 1
    assert _count(client.engine, "booking_passengers") == 3

    detail = client.get(f"/api/bookings/{data['booking_id']}").json()
    assert detail["booking_ref"] == data["booking_ref"]
    assert detail["status"] == "pending"
    assert [p["first_name"] for p in detail["passengers"]] == ["Asha", "Ravi", "Mira"]
    assert client.engine.pool.checkedout() == 0


def test_duplicate_passenger_rolls_back_everything(client):
    """(error) the 2nd of 3 passengers violates the key -> no booking, no passengers"""
    r = client.post(
        "/api/bookings",
        json=_booking(
            [
                _passenger("Asha", passport_no="P1"),
                _passenger("Ravi", passport_no="P1"),
                _passenger("Mira", passenger_type="child", passport_no="P3"),
            ]
        ),
    )
    assert r.status_code == 500
    assert _count(client.engine, "tour_bookings") == 0
    assert _count(client.engine, "booking_passengers") == 0
    assert client.engine.pool.checkedout() == 0


def test_total_adult_is_required(client):
    """(error) total_adult < 1 is rejected before anything is written"""
    r = client.post("/api/bookings", json=_booking([_passenger("Asha")], total_adult=0))
    assert r.status_code == 422
    assert _count(client.engine, "tour_bookings") == 0


def test_list_customer_bookings_newest_first(client):
    first = client.post("/api/bookings", json=_booking([_passenger("A")])).json()
    second = client.post("/api/bookings", json=_booking([_passenger("B")])).json()
    client.post("/api/bookings", json=_booking([_passenger("C")], customer_id=99))

    r = client.get("/api/bookings/customer/42")
    assert r.status_code == 200
    assert [b["booking_id"] for b in r.json()] == [second["booking_id"], first["booking_id"]]


def test_unknown_booking_is_404(client):
    assert client.get("/api/bookings/12345").status_code == 404
