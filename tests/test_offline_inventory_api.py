# tests/test_offline_inventory_api.py
from sqlalchemy import text

from backoffice.db.core import read_connection
from backoffice.offline_inventory.dtos import FlightFiltersInput
from backoffice.offline_inventory.services.offline_flight_service import (
    HIDE_NEARBY_PRICE,
    flatten_flight_filters,
)


def _count(engine, table, where=""):
    with read_connection(engine) as conn:
        return conn.execute(text(f"SELECT COUNT(*) FROM {table} {where}")).scalar_one()


# ============================================================
# Offline flights
# ============================================================

def _flight(**filters):
    body_filters = {
        "stops": [
            {"type": "Non Stop", "price": 5200, "selected": True},
            {"type": "1 Stop", "price": 4300},
        ],
        "hideNearbyAirports": True,
        "departureAirports": [{"name": "Chhatrapati Shivaji", "code": "BOM", "price": 5200}],
        "departureTimeRanges": [{"range": "Before 6 AM"}, {"range": "6 AM - 12 PM"}],
        "arrivalTimeRanges": [{"range": "After 6 PM", "selected": True}],
        "airlines": [{"name": "IndiGo", "code": "6E", "price": 4300}],
        "aircraftSizes": [{"size": "Small Aircraft"}],
        "minPrice": 4000,
        "maxPrice": 9000,
    }
    body_filters.update(filters)
    return {
        "bookingType": "oneWay",
        "flightDetails": {
            "fromCity": "Mumbai",
            "fromAirportCode": "BOM",
            "toCity": "Delhi",
            "toAirportCode": "DEL",
            "departureDate": "2026-12-01",
            "airline": "IndiGo",
            "flightNumber": "6E-201",
            "pricePerAdult": 5200,
        },
        "filters": body_filters,
    }


def test_flatten_flight_filters_order():
    rows = flatten_flight_filters(FlightFiltersInput(**_flight()["filters"]))

    assert [r["filter_type"] for r in rows[:4]] == [
        "non_stop",
        "hide_nearby",
        "refundable",
        "one_stop",
    ]
    assert rows[0]["filter_price"] == 5200 and rows[0]["is_selected"] is True
    assert rows[1]["filter_price"] == HIDE_NEARBY_PRICE and rows[1]["is_selected"] is True
    assert rows[2]["is_selected"] is False
    assert [r["filter_category"] for r in rows[4:]] == [
        "departure_airport",
        "stops",
        "stops",
        "departure_time",
        "departure_time",
        "arrival_time",
        "airline",
        "aircraft_size",
    ]
    assert rows[6]["filter_value"] == "1_stop"
    assert rows[8]["filter_value"] == "departure_1"


def test_flatten_without_stops_keeps_popular_rows():
    rows = flatten_flight_filters(FlightFiltersInput())
    assert len(rows) == 4
    assert rows[0]["filter_price"] is None and rows[0]["is_selected"] is False


def test_offline_flight_crud(client):
    r = client.post("/api/offline-flights", json=_flight())
    assert r.status_code == 201, r.text
    created = r.json()
    flight_id = created["id"]
    assert created["child_counts"] == {"filters": 12, "price_ranges": 1}

    detail = client.get(f"/api/offline-flights/{flight_id}").json()
    assert detail["from_city"] == "Mumbai"
    assert detail["status"] == "Available"
    assert detail["price_range"]["min_price"] == 4000
    assert len(detail["filters"]) == 12

    # PUT replaces every filter row
    r = client.put(
        f"/api/offline-flights/{flight_id}",
        json=_flight(stops=[], departureAirports=[], airlines=[], aircraftSizes=[]),
    )
    assert r.status_code == 200, r.text
    assert _count(client.engine, "offline_flight_filters") == 7
    assert _count(client.engine, "offline_flight_price_ranges") == 1

    assert [f["id"] for f in client.get("/api/offline-flights").json()] == [flight_id]

    r = client.delete(f"/api/offline-flights/{flight_id}")
    assert r.status_code == 200
    assert _count(client.engine, "offline_flights") == 0
    assert _count(client.engine, "offline_flight_filters") == 0
    assert client.get(f"/api/offline-flights/{flight_id}").status_code == 404


def test_offline_flight_put_unknown_is_404(client):
    r = client.put("/api/offline-flights/999", json=_flight())
    assert r.status_code == 404
    assert _count(client.engine, "offline_flight_filters") == 0


# ============================================================
# Offline hotels
# ============================================================

def _hotel(**hotel_details):
    details = {
        "hotelName": "Sea Breeze",
        "location": "Baga",
        "starRating": 4,
        "mainImage": "uploads/hotels/main-1.jpg",
        "additionalImages": ["uploads/hotels/a.jpg", "uploads/hotels/b.jpg"],
        "price": 6400,
    }
    details.update(hotel_details)
    return {
        "searchDetails": {
            "country": "India",
            "city": "Goa",
            "checkInDate": "2026-12-20",
            "checkOutDate": "2026-12-23",
            "rooms": 1,
            "adults": 2,
            "children": 1,
        },
        "childrenAges": [6],
        "hotelDetails": details,
        "descriptions": {"overview": "Beach front"},
        "filters": {
            "priceRanges": [
                {"min": 0, "max": 2000, "range": "0 - 2000", "count": 3},
                {"min": 2000, "max": 8000, "range": "2000 - 8000", "count": 9, "selected": True},
            ],
            "starCategories": [{"stars": 4, "count": 12, "selected": True}],
            "budget": {"min": 1000, "max": 9000},
            "searchLocality": " Baga ",
        },
    }


def test_offline_hotel_crud(client):
    r = client.post("/api/offline-hotels", json=_hotel())
    assert r.status_code == 201, r.text
    hotel_id = r.json()["id"]
    assert r.json()["child_counts"] == {
        "price_ranges": 2,
        "star_categories": 1,
        "budget": 1,
        "search_localities": 1,
    }

    detail = client.get(f"/api/offline-hotels/{hotel_id}").json()
    assert detail["children_ages"] == [6]
    assert detail["additional_images"] == ["uploads/hotels/a.jpg", "uploads/hotels/b.jpg"]
    assert detail["filters"]["budget"]["max_budget"] == 9000
    assert detail["filters"]["search_localities"][0]["locality_name"] == "Baga"

    body = _hotel(hotelName="Sea Breeze Deluxe")
    body["filters"] = {"starCategories": [{"stars": 5}]}
    r = client.put(f"/api/offline-hotels/{hotel_id}", json=body)
    assert r.status_code == 200, r.text

    detail = client.get(f"/api/offline-hotels/{hotel_id}").json()
    assert detail["hotel_name"] == "Sea Breeze Deluxe"
    assert detail["filters"]["price_ranges"] == []
    assert detail["filters"]["budget"] is None
    assert [s["stars"] for s in detail["filters"]["star_categories"]] == [5]

    listed = client.get("/api/offline-hotels").json()
    assert listed[0]["children_ages"] == [6]

    assert client.delete(f"/api/offline-hotels/{hotel_id}").status_code == 200
    assert _count(client.engine, "offline_hotel_star_categories") == 0


def test_offline_hotel_bulk_delete(client):
    ids = [client.post("/api/offline-hotels", json=_hotel()).json()["id"] for _ in range(3)]

    r = client.post("/api/offline-hotels/bulk-delete", json={"ids": ids[:2] + [999]})
    assert r.status_code == 200, r.text
    data = r.json()
    assert data["deleted"] == 2
    assert "uploads/hotels/main-1.jpg" in data["released_images"]
    assert len(data["released_images"]) == 6

    assert _count(client.engine, "offline_hotels") == 1
    assert _count(client.engine, "offline_hotel_price_ranges", f"WHERE hotel_id = {ids[2]}") == 2
    assert _count(client.engine, "offline_hotel_price_ranges") == 2

    r = client.post("/api/offline-hotels/bulk-delete", json={"ids": []})
    assert r.status_code == 400


def test_offline_hotel_validation(client):
    body = _hotel()
    del body["hotelDetails"]["hotelName"]
    r = client.post("/api/offline-hotels", json=body)
    assert r.status_code == 422
    assert _count(client.engine, "offline_hotels") == 0
