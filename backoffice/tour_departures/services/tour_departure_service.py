from __future__ import annotations

from datetime import date
from typing import Any, Dict, List, Optional

from sqlalchemy.engine import Engine

from backoffice.common.errors import ValidationError
from backoffice.tour_departures.dtos import (
    DepartureBulkCreatedDTO,
    DepartureBulkInput,
    DepartureInput,
)
from backoffice.tour_departures.repository.tour_departure_repo import TourDepartureRepository

# tour_costs key -> column prefix, cost key -> column suffix
_TIERS = {"threeStar": "three_star", "fourStar": "four_star", "fiveStar": "five_star"}
_COSTS = {
    "perPaxTwin": "twin",
    "perPaxTriple": "triple",
    "childWithBed": "child_with_bed",
    "childWithoutBed": "child_without_bed",
    "infant": "infant",
    "perPaxSingle": "single",
}


def departure_row(dep: DepartureInput) -> Dict[str, Any]:
    """
    One request departure -> one tour_departures row.

    Individual tours keep departure_text only, Group tours keep description
    only. tour_costs.<tier>.<cost> lands in the flat <tier>_<cost> columns.
    """
    individual = dep.tour_type == "Individual"
    row: Dict[str, Any] = {
        "tour_type": dep.tour_type,
        "description": None if individual else (dep.description or None),
        "departure_text": (dep.departure_text or None) if individual else None,
        "start_date": dep.start_date,
        "end_date": dep.end_date,
        "departure_date": dep.departure_date,
        "return_date": dep.return_date,
        "status": dep.status or "Available",
        "adult_price": dep.price if dep.price is not None else dep.adult_price,
        "child_price": dep.child_price,
        "infant_price": dep.infant_price,
        "total_seats": dep.total_seats,
        "booked_seats": dep.booked_seats,
    }

    costs = dep.tour_costs.model_dump() if dep.tour_costs else {}
    for tier_key, tier in _TIERS.items():
        tier_costs = costs.get(tier_key) or {}
        for cost_key, cost in _COSTS.items():
            row[f"{tier}_{cost}"] = tier_costs.get(cost_key)
    return row


_DATE_COLUMNS = ("start_date", "end_date", "departure_date", "return_date")


def _parse_dates(fields: Dict[str, Any]) -> Dict[str, Any]:
    parsed = dict(fields)
    for name in _DATE_COLUMNS:
        value = parsed.get(name)
        if isinstance(value, str):
            try:
                parsed[name] = date.fromisoformat(value)
            except ValueError:
                raise ValidationError(f"{name} must be an ISO date (YYYY-MM-DD)")
    return parsed


class TourDepartureService:
    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        repo: Optional[TourDepartureRepository] = None,
    ) -> None:
        self.repo = repo or TourDepartureRepository(engine=engine)

    def create_bulk(self, payload: DepartureBulkInput) -> DepartureBulkCreatedDTO:
        if not payload.departures:
            raise ValidationError("tour_id and a non-empty departures array are required")

        rows = []
        for index, dep in enumerate(payload.departures):
            if dep.booked_seats > dep.total_seats:
                raise ValidationError(
                    f"departures[{index}]: booked_seats exceeds total_seats"
                )
            rows.append(departure_row(dep))

        ids = self.repo.insert_many(payload.tour_id, rows)
        return DepartureBulkCreatedDTO(tour_id=payload.tour_id, created=len(ids), departure_ids=ids)

    def list_for_tour(self, tour_id: int) -> List[Dict[str, Any]]:
        return self.repo.list_for_tour(tour_id)

    def update_departure(self, departure_id: int, fields: Dict[str, Any]) -> None:
        self.repo.update(departure_id, _parse_dates(fields))

    def delete_departure(self, departure_id: int) -> None:
        self.repo.delete(departure_id)
