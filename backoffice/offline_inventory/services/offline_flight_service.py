from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import CompositePayload
from backoffice.offline_inventory.dtos import (
    FlightFiltersInput,
    OfflineFlightInput,
    OfflineWriteResultDTO,
)
from backoffice.offline_inventory.repository.offline_flight_repo import (
    OfflineFlightRepository,
)

# Fixed display prices the admin UI shows next to these two popular filters
HIDE_NEARBY_PRICE = 7121.0
REFUNDABLE_PRICE = 6848.0


def _slug(value: str) -> str:
    return re.sub(r"\s+", "_", value.strip().lower())


def _filter_row(
    category: str,
    filter_type: str,
    name: str,
    value: str,
    price: Optional[float],
    selected: bool,
) -> Dict[str, Any]:
    return {
        "filter_category": category,
        "filter_type": filter_type,
        "filter_name": name,
        "filter_value": value,
        "filter_price": price,
        "is_selected": bool(selected),
    }


def flatten_flight_filters(filters: FlightFiltersInput) -> List[Dict[str, Any]]:
    """
    Nested filter payload -> offline_flight_filters rows.

    Row order: popular (non stop, hide nearby, refundable, 1 stop), departure
    airports, stops, departure time ranges, arrival time ranges, airlines,
    aircraft sizes. Popular "non stop" / "1 stop" mirror stops[0] / stops[1].
    """
    stops = filters.stops
    non_stop = stops[0] if len(stops) > 0 else None
    one_stop = stops[1] if len(stops) > 1 else None

    rows: List[Dict[str, Any]] = [
        _filter_row(
            "popular", "non_stop", "Non Stop", "non_stop",
            non_stop.price if non_stop else None,
            non_stop.selected if non_stop else False,
        ),
        _filter_row(
            "popular", "hide_nearby", "Hide Nearby Airports", "hide_nearby",
            HIDE_NEARBY_PRICE, filters.hide_nearby_airports,
        ),
        _filter_row(
            "popular", "refundable", "Refundable Fares", "refundable",
            REFUNDABLE_PRICE, filters.refundable_fares,
        ),
        _filter_row(
            "popular", "one_stop", "1 Stop", "one_stop",
            one_stop.price if one_stop else None,
            one_stop.selected if one_stop else False,
        ),
    ]

    rows += [
        _filter_row("departure_airport", "airport", a.name, a.code, a.price, a.selected)
        for a in filters.departure_airports
    ]
    rows += [
        _filter_row("stops", "stop", s.type, _slug(s.type), s.price, s.selected)
        for s in stops
    ]
    rows += [
        _filter_row("departure_time", "time_range", r.range, f"departure_{i}", None, r.selected)
        for i, r in enumerate(filters.departure_time_ranges)
    ]
    rows += [
        _filter_row("arrival_time", "time_range", r.range, f"arrival_{i}", None, r.selected)
        for i, r in enumerate(filters.arrival_time_ranges)
    ]
    rows += [
        _filter_row("airline", "airline", a.name, a.code, a.price, a.selected)
        for a in filters.airlines
    ]
    rows += [
        _filter_row("aircraft_size", "size", s.size, _slug(s.size), s.price, s.selected)
        for s in filters.aircraft_sizes
    ]
    return rows


class OfflineFlightService:
    """
    Offline flight listings (admin-entered fares).

    create / replace / delete go through the composite writer; PUT is a full
    replacement of the flight row and of every filter / price-range row.
    """

    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        repo: Optional[OfflineFlightRepository] = None,
    ) -> None:
        self._repo = repo or OfflineFlightRepository(engine=engine)

    def create_flight(self, payload: OfflineFlightInput) -> OfflineWriteResultDTO:
        result = self._repo.writer.create(self._to_composite(payload))
        return OfflineWriteResultDTO(id=result.parent_id, child_counts=result.child_counts)

    def replace_flight(self, flight_id: int, payload: OfflineFlightInput) -> OfflineWriteResultDTO:
        result = self._repo.writer.replace(flight_id, self._to_composite(payload))
        return OfflineWriteResultDTO(id=result.parent_id, child_counts=result.child_counts)

    def delete_flight(self, flight_id: int) -> None:
        self._repo.writer.delete(flight_id)

    def get_flight(self, flight_id: int) -> Dict[str, Any]:
        data = self._repo.writer.fetch(flight_id)
        price_ranges = data.pop("price_ranges")
        data["price_range"] = price_ranges[0] if price_ranges else None
        return data

    def list_flights(self) -> List[Dict[str, Any]]:
        return self._repo.list_all()

    # --------------------------------------------------------
    # Internal
    # --------------------------------------------------------

    @staticmethod
    def _to_composite(payload: OfflineFlightInput) -> CompositePayload:
        parent = payload.flight_details.model_dump()
        parent["booking_type"] = payload.booking_type

        filters = payload.filters
        return CompositePayload(
            parent=parent,
            children={
                "filters": flatten_flight_filters(filters),
                "price_ranges": [
                    {"min_price": filters.min_price, "max_price": filters.max_price}
                ],
            },
        )
