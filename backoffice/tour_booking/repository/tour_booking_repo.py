# backoffice/tour_booking/repository/tour_booking_repo.py
from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import ChildSpec, CompositeSpec, CompositeWriter
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection

# ============================================================
# Composite definition (tour_bookings 1:N booking_passengers)
# ============================================================

TOUR_BOOKING_SPEC = CompositeSpec(
    entity="tour_booking",
    parent=tables.tour_bookings,
    key="booking_id",
    columns=(
        "booking_ref",
        "customer_id",
        "departure_id",
        "total_adult",
        "total_child",
        "total_infant",
        "total_amount",
        "status",
    ),
    required=("booking_ref", "customer_id", "departure_id", "total_adult", "total_amount"),
    children=(
        ChildSpec(
            name="passengers",
            table=tables.booking_passengers,
            parent_key="booking_id",
            columns=(
                "first_name",
                "last_name",
                "gender",
                "date_of_birth",
                "passenger_type",
                "passport_no",
            ),
            required=("first_name", "last_name", "passenger_type"),
        ),
    ),
)


class TourBookingRepository:
    """
    Responsibilities:
      - tour_bookings / booking_passengers persistence (via CompositeWriter)
      - list queries

    No business rules (reference generation etc. belongs to the service).
    """

    def __init__(self, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self.writer = CompositeWriter(TOUR_BOOKING_SPEC, engine=self._engine)

    def list_by_customer(self, customer_id: int) -> List[Dict[str, Any]]:
        with read_connection(self._engine) as conn:
            rows = conn.execute(
                text(
                    """
                    SELECT *
                    FROM tour_bookings
                    WHERE customer_id = :customer_id
                    ORDER BY booking_date DESC, booking_id DESC
                    """
                ),
                {"customer_id": customer_id},
            ).mappings().all()
        return [dict(r) for r in rows]
