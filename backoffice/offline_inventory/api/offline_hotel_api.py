from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.offline_inventory.dtos import (
    BulkDeleteInput,
    BulkDeleteResultDTO,
    OfflineHotelInput,
    OfflineWriteResultDTO,
)
from backoffice.offline_inventory.services.offline_hotel_service import (
    OfflineHotelService,
)

router = APIRouter(prefix="/api/offline-hotels", tags=["offline_hotels"])


@router.get("")
def list_offline_hotels(engine: Engine = Depends(get_engine)) -> List[Dict[str, Any]]:
    try:
        return OfflineHotelService(engine=engine).list_hotels()
    except BackofficeError as e:
        raise http_error(e)


@router.get("/{hotel_id}")
def get_offline_hotel(
    hotel_id: int,
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        return OfflineHotelService(engine=engine).get_hotel(hotel_id)
    except BackofficeError as e:
        raise http_error(e)


@router.post(
    "",
    response_model=OfflineWriteResultDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_offline_hotel(
    payload: OfflineHotelInput,
    engine: Engine = Depends(get_engine),
) -> OfflineWriteResultDTO:
    """
    Create a hotel with its filter tables.

    Images must already be uploaded; only their paths travel in the body.
    """
    try:
        return OfflineHotelService(engine=engine).create_hotel(payload)
    except BackofficeError as e:
        raise http_error(e)


@router.put("/{hotel_id}", response_model=OfflineWriteResultDTO)
def replace_offline_hotel(
    hotel_id: int,
    payload: OfflineHotelInput,
    engine: Engine = Depends(get_engine),
) -> OfflineWriteResultDTO:
    try:
        return OfflineHotelService(engine=engine).replace_hotel(hotel_id, payload)
    except BackofficeError as e:
        raise http_error(e)


@router.delete("/{hotel_id}")
def delete_offline_hotel(
    hotel_id: int,
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        OfflineHotelService(engine=engine).delete_hotel(hotel_id)
    except BackofficeError as e:
        raise http_error(e)
    return {"ok": True, "id": hotel_id}


@router.post("/bulk-delete", response_model=BulkDeleteResultDTO)
def bulk_delete_offline_hotels(
    body: BulkDeleteInput,
    engine: Engine = Depends(get_engine),
) -> BulkDeleteResultDTO:
    try:
        return OfflineHotelService(engine=engine).bulk_delete(body.ids)
    except BackofficeError as e:
        raise http_error(e)
