# tests/test_composite_writer.py
from unittest.mock import MagicMock

import pytest
from sqlalchemy import select

from backoffice.common.errors import NotFound, PersistenceError, ValidationError
from backoffice.composite.composite_writer import CompositePayload, CompositeWriter
from backoffice.db import tables
from backoffice.db.core import read_connection
from backoffice.stays.repository.stay_booking_repo import BUNGALOW_BOOKING_SPEC
from backoffice.tour_booking.repository.tour_booking_repo import TOUR_BOOKING_SPEC


def _bungalow(**overrides):
    parent = {
        "bungalow_code": "BNG-01",
        "city": "Lonavala",
        "contact_person": "Ravi",
        "cell_no": "9800000000",
    }
    parent.update(overrides)
    return parent


def _rows(engine, table):
    with read_connection(engine) as conn:
        return [dict(r) for r in conn.execute(select(table)).mappings().all()]


def test_create_writes_parent_and_children(engine):
    """(happy path) parent + N children, children carry the generated key"""
    writer = CompositeWriter(BUNGALOW_BOOKING_SPEC, engine=engine)
    result = writer.create(
        CompositePayload(
            parent=_bungalow(),
            children={"guests": [{"name": "A", "age": 30}, {"name": "B"}]},
        )
    )

    assert result.child_counts == {"guests": 2}
    guests = _rows(engine, tables.bungalow_booking_guests)
    assert {g["booking_id"] for g in guests} == {result.parent_id}
    assert [g["name"] for g in guests] == ["A", "B"]

    parent = _rows(engine, tables.bungalow_bookings)[0]
    # None / omitted -> server default
    assert parent["country"] == "India"
    assert engine.pool.checkedout() == 0


def test_child_failure_rolls_back_parent(engine):
    """(error) a failing child insert leaves neither parent nor children"""
    writer = CompositeWriter(TOUR_BOOKING_SPEC, engine=engine)
    passenger = {
        "first_name": "Asha",
        "last_name": "Rao",
        "passenger_type": "adult",
        "passport_no": "P123",
    }
    payload = CompositePayload(
        parent={
            "booking_ref": "KES1",
            "customer_id": 1,
            "departure_id": 1,
            "total_adult": 2,
            "total_amount": 1000,
        },
        children={"passengers": [passenger, dict(passenger, first_name="Dup")]},
    )

    with pytest.raises(PersistenceError):
        writer.create(payload)

    assert _rows(engine, tables.tour_bookings) == []
    assert _rows(engine, tables.booking_passengers) == []
    assert engine.pool.checkedout() == 0


@pytest.mark.parametrize(
    "payload",
    [
        CompositePayload(parent=_bungalow(unknown="x")),
        CompositePayload(parent=_bungalow(city="  ")),
        CompositePayload(parent=_bungalow(), children={"pets": []}),
        CompositePayload(parent=_bungalow(), children={"guests": [{"age": 3}]}),
        CompositePayload(parent=_bungalow(), children={"guests": ["not-a-row"]}),
    ],
)
def test_validation_happens_before_checkout(payload):
    """(error) malformed payloads never reach the database"""
    engine = MagicMock()
    writer = CompositeWriter(BUNGALOW_BOOKING_SPEC, engine=engine)

    with pytest.raises(ValidationError):
        writer.create(payload)
    engine.connect.assert_not_called()


def test_replace_leaves_exactly_the_new_set(engine):
    """(happy path) replace twice with the same payload -> the same single set"""
    writer = CompositeWriter(BUNGALOW_BOOKING_SPEC, engine=engine)
    created = writer.create(
        CompositePayload(parent=_bungalow(), children={"guests": [{"name": "Old"}]})
    )

    new = CompositePayload(
        parent=_bungalow(city="Pune"),
        children={"guests": [{"name": "N1"}, {"name": "N2"}]},
    )
    writer.replace(created.parent_id, new)
    writer.replace(created.parent_id, new)

    data = writer.fetch(created.parent_id)
    assert data["city"] == "Pune"
    assert [g["name"] for g in data["guests"]] == ["N1", "N2"]
    assert len(_rows(engine, tables.bungalow_booking_guests)) == 2


def test_replace_missing_collection_means_empty(engine):
    writer = CompositeWriter(BUNGALOW_BOOKING_SPEC, engine=engine)
    created = writer.create(
        CompositePayload(parent=_bungalow(), children={"guests": [{"name": "Old"}]})
    )

    result = writer.replace(created.parent_id, CompositePayload(parent=_bungalow()))

    assert result.child_counts == {"guests": 0}
    assert _rows(engine, tables.bungalow_booking_guests) == []


def test_replace_unknown_parent_is_not_found(engine):
    writer = CompositeWriter(BUNGALOW_BOOKING_SPEC, engine=engine)
    with pytest.raises(NotFound):
        writer.replace(
            404, CompositePayload(parent=_bungalow(), children={"guests": [{"name": "X"}]})
        )
    assert _rows(engine, tables.bungalow_booking_guests) == []


def test_append_keeps_existing_children(engine):
    writer = CompositeWriter(BUNGALOW_BOOKING_SPEC, engine=engine)
    created = writer.create(
        CompositePayload(parent=_bungalow(), children={"guests": [{"name": "A"}]})
    )

    result = writer.append(
        created.parent_id,
        CompositePayload(
            parent={"city": "Pune", "state": None},
            children={"guests": [{"name": "B"}]},
        ),
    )

    assert result.child_counts == {"guests": 1}
    data = writer.fetch(created.parent_id)
    assert data["city"] == "Pune"
    assert data["contact_person"] == "Ravi"
    assert [g["name"] for g in data["guests"]] == ["A", "B"]

    with pytest.raises(NotFound):
        writer.append(404, CompositePayload(parent={}, children={"guests": [{"name": "C"}]}))
    with pytest.raises(ValidationError):
        writer.append(created.parent_id, CompositePayload(parent={}, children={"guests": [{}]}))
    assert len(_rows(engine, tables.bungalow_booking_guests)) == 2
    assert engine.pool.checkedout() == 0


def test_delete_removes_children_first(engine):
    writer = CompositeWriter(BUNGALOW_BOOKING_SPEC, engine=engine)
    created = writer.create(
        CompositePayload(parent=_bungalow(), children={"guests": [{"name": "A"}]})
    )

    writer.delete(created.parent_id)

    assert _rows(engine, tables.bungalow_bookings) == []
    assert _rows(engine, tables.bungalow_booking_guests) == []
    with pytest.raises(NotFound):
        writer.delete(created.parent_id)
    with pytest.raises(NotFound):
        writer.fetch(created.parent_id)


def test_delete_many(engine):
    writer = CompositeWriter(BUNGALOW_BOOKING_SPEC, engine=engine)
    ids = [
        writer.create(
            CompositePayload(parent=_bungalow(), children={"guests": [{"name": str(i)}]})
        ).parent_id
        for i in range(3)
    ]

    assert writer.delete_many(ids[:2] + [999]) == 2
    assert [r["booking_id"] for r in _rows(engine, tables.bungalow_bookings)] == [ids[2]]
    assert writer.delete_many([998]) == 0

    with pytest.raises(ValidationError):
        writer.delete_many([])
