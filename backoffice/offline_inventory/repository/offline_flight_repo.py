from __future__ import annotations

from typing import Any, Dict, List, Optional

from sqlalchemy import text
from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import ChildSpec, CompositeSpec, CompositeWriter
from backoffice.db import tables
from backoffice.db.core import get_engine, read_connection

OFFLINE_FLIGHT_SPEC = CompositeSpec(
    entity="offline_flight",
    parent=tables.offline_flights,
    key="id",
    columns=(
        "booking_type",
        "from_city",
        "from_airport",
        "from_airport_code",
        "to_city",
        "to_airport",
        "to_airport_code",
        "departure_date",
        "return_date",
        "adults",
        "children",
        "infants",
        "traveller_class",
        "flight_time",
        "duration",
        "arrival_time",
        "flight_type",
        "airline",
        "flight_number",
        "baggage_allowance",
        "meals_seat_description",
        "refundable_status_description",
        "meals_included",
        "price_per_adult",
        "status",
    ),
    required=("booking_type", "from_city", "to_city", "departure_date", "price_per_adult"),
    children=(
        ChildSpec(
            name="filters",
            table=tables.offline_flight_filters,
            parent_key="flight_id",
            columns=(
                "filter_category",
                "filter_type",
                "filter_name",
                "filter_value",
                "filter_price",
                "is_selected",
            ),
            required=("filter_category", "filter_type", "filter_name", "filter_value"),
        ),
        ChildSpec(
            name="price_ranges",
            table=tables.offline_flight_price_ranges,
            parent_key="flight_id",
            columns=("min_price", "max_price"),
        ),
    ),
)


class OfflineFlightRepository:
    def __init__(self, *, engine: Optional[Engine] = None) -> None:
        self._engine = engine or get_engine()
        self.writer = CompositeWriter(OFFLINE_FLIGHT_SPEC, engine=self._engine)

    def list_all(self) -> List[Dict[str, Any]]:
        with read_connection(self._engine) as conn:
            rows = conn.execute(
                text("SELECT * FROM offline_flights ORDER BY created_at DESC, id DESC")
            ).mappings().all()
        return [dict(r) for r in rows]
