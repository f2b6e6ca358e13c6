from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import select
from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import ChildSpec, CompositeSpec, CompositeWriter
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection

_GUEST_COLUMNS = ("name", "age", "cell_no", "email_id")

BUNGALOW_BOOKING_SPEC = CompositeSpec(
    entity="bungalow_booking",
    parent=tables.bungalow_bookings,
    key="booking_id",
    columns=(
        "bungalow_code",
        "city",
        "contact_person",
        "cell_no",
        "email_id",
        "address",
        "pin_code",
        "state",
        "country",
        "no_of_people",
    ),
    required=("bungalow_code", "city", "contact_person", "cell_no"),
    children=(
        ChildSpec(
            name="guests",
            table=tables.bungalow_booking_guests,
            parent_key="booking_id",
            columns=_GUEST_COLUMNS,
            required=("name",),
        ),
    ),
)

WEEKEND_BOOKING_SPEC = CompositeSpec(
    entity="weekend_booking",
    parent=tables.weekend_bookings,
    key="booking_id",
    columns=(
        "property_name",
        "city",
        "person_name",
        "cell_no",
        "email_id",
        "address",
        "city_location",
        "pin_code",
        "state",
        "country",
        "no_of_adults",
        "no_of_rooms",
        "no_of_child",
    ),
    required=("property_name", "city", "person_name", "cell_no"),
    children=(
        ChildSpec(
            name="children",
            table=tables.weekend_booking_children,
            parent_key="booking_id",
            columns=_GUEST_COLUMNS,
            required=("name",),
        ),
    ),
)


class StayBookingRepository:
    """
    One repository per stay kind (bungalow / weekend gateway); the two differ
    only by their CompositeSpec.
    """

    def __init__(self, spec: CompositeSpec, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self.spec = spec
        self.writer = CompositeWriter(spec, engine=self._engine)

    def list_with_guests(self) -> List[Dict[str, Any]]:
        """All bookings, newest first, each with its guest rows and a guest count."""
        parent = self.spec.parent
        child = self.spec.children[0]
        key = parent.c[self.spec.key]

        with read_connection(self._engine) as conn:
            bookings = [
                dict(r)
                for r in conn.execute(
                    select(parent).order_by(parent.c.created_at.desc(), key.desc())
                ).mappings()
            ]
            if not bookings:
                return []

            ids = [b[self.spec.key] for b in bookings]
            guest_rows = conn.execute(
                select(child.table)
                .where(child.table.c[child.parent_key].in_(ids))
                .order_by(child.order_column)
            ).mappings().all()

        by_booking: Dict[int, List[Dict[str, Any]]] = {i: [] for i in ids}
        for g in guest_rows:
            by_booking[g[child.parent_key]].append(dict(g))

        for b in bookings:
            b[child.name] = by_booking[b[self.spec.key]]
            b[f"actual_{child.name}"] = len(b[child.name])
        return bookings
