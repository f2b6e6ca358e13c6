from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.offline_inventory.dtos import OfflineFlightInput, OfflineWriteResultDTO
from backoffice.offline_inventory.services.offline_flight_service import (
    OfflineFlightService,
)

router = APIRouter(prefix="/api/offline-flights", tags=["offline_flights"])


@router.get("")
def list_offline_flights(engine: Engine = Depends(get_engine)) -> List[Dict[str, Any]]:
    try:
        return OfflineFlightService(engine=engine).list_flights()
    except BackofficeError as e:
        raise http_error(e)


@router.get("/{flight_id}")
def get_offline_flight(
    flight_id: int,
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    """Flight row with its `filters` rows and `price_range`."""
    try:
        return OfflineFlightService(engine=engine).get_flight(flight_id)
    except BackofficeError as e:
        raise http_error(e)


@router.post(
    "",
    response_model=OfflineWriteResultDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_offline_flight(
    payload: OfflineFlightInput,
    engine: Engine = Depends(get_engine),
) -> OfflineWriteResultDTO:
    try:
        return OfflineFlightService(engine=engine).create_flight(payload)
    except BackofficeError as e:
        raise http_error(e)


@router.put("/{flight_id}", response_model=OfflineWriteResultDTO)
def replace_offline_flight(
    flight_id: int,
    payload: OfflineFlightInput,
    engine: Engine = Depends(get_engine),
) -> OfflineWriteResultDTO:
    """
    Full replacement.

    The flight row is overwritten and every filter / price-range row is
    deleted and re-inserted from the payload. Send the complete filter set.
    """
    try:
        return OfflineFlightService(engine=engine).replace_flight(flight_id, payload)
    except BackofficeError as e:
        raise http_error(e)


@router.delete("/{flight_id}")
def delete_offline_flight(
    flight_id: int,
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        OfflineFlightService(engine=engine).delete_flight(flight_id)
    except BackofficeError as e:
        raise http_error(e)
    return {"ok": True, "id": flight_id}
