from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Body, Depends, status
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.tour_departures.dtos import DepartureBulkCreatedDTO, DepartureBulkInput
from backoffice.tour_departures.services.tour_departure_service import TourDepartureService

router = APIRouter(
    prefix="/api/departures",
    tags=["tour_departures"],
)


@router.get("/tour/{tour_id}")
def list_departures(tour_id: int, engine: Engine = Depends(get_engine)) -> List[Dict[str, Any]]:
    """Departures of a tour with available_seats = total_seats - booked_seats."""
    try:
        return TourDepartureService(engine=engine).list_for_tour(tour_id)
    except BackofficeError as e:
        raise http_error(e)


@router.post(
    "/bulk",
    response_model=DepartureBulkCreatedDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_departures_bulk(
    payload: DepartureBulkInput,
    engine: Engine = Depends(get_engine),
) -> DepartureBulkCreatedDTO:
    """All departures of the request in one transaction (all or none)."""
    try:
        return TourDepartureService(engine=engine).create_bulk(payload)
    except BackofficeError as e:
        raise http_error(e)


@router.put("/{departure_id}")
def update_departure(
    departure_id: int,
    fields: Dict[str, Any] = Body(...),
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        TourDepartureService(engine=engine).update_departure(departure_id, fields)
    except BackofficeError as e:
        raise http_error(e)
    return {"ok": True, "departure_id": departure_id}


@router.delete("/{departure_id}")
def delete_departure(departure_id: int, engine: Engine = Depends(get_engine)) -> Dict[str, Any]:
    try:
        TourDepartureService(engine=engine).delete_departure(departure_id)
    except BackofficeError as e:
        raise http_error(e)
    return {"ok": True, "departure_id": departure_id}
