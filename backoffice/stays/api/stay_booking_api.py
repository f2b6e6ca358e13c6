from __future__ import annotations

from typing import Any, Dict, List

from fastapi import APIRouter, Depends, status
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.stays.dtos import (
    BungalowBookingInput,
    StayBookingCreatedDTO,
    WeekendBookingInput,
)
from backoffice.stays.services.stay_booking_service import StayBookingService

# ============================================================
# Bungalow bookings
# ============================================================

bungalow_router = APIRouter(
    prefix="/api/bungalows/bookings",
    tags=["bungalow_bookings"],
)


@bungalow_router.post(
    "",
    response_model=StayBookingCreatedDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_bungalow_booking(
    payload: BungalowBookingInput,
    engine: Engine = Depends(get_engine),
) -> StayBookingCreatedDTO:
    try:
        return StayBookingService.bungalows(engine=engine).create_booking(payload)
    except BackofficeError as e:
        raise http_error(e)


@bungalow_router.get("")
def list_bungalow_bookings(engine: Engine = Depends(get_engine)) -> List[Dict[str, Any]]:
    try:
        return StayBookingService.bungalows(engine=engine).list_bookings()
    except BackofficeError as e:
        raise http_error(e)


@bungalow_router.get("/{booking_id}")
def get_bungalow_booking(
    booking_id: int,
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        return StayBookingService.bungalows(engine=engine).get_booking(booking_id)
    except BackofficeError as e:
        raise http_error(e)


@bungalow_router.delete("/{booking_id}")
def delete_bungalow_booking(
    booking_id: int,
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        StayBookingService.bungalows(engine=engine).delete_booking(booking_id)
    except BackofficeError as e:
        raise http_error(e)
    return {"ok": True, "booking_id": booking_id}


# ============================================================
# Weekend gateway bookings
# ============================================================

weekend_router = APIRouter(
    prefix="/api/weekend-gateways/bookings",
    tags=["weekend_gateway_bookings"],
)


@weekend_router.post(
    "",
    response_model=StayBookingCreatedDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_weekend_booking(
    payload: WeekendBookingInput,
    engine: Engine = Depends(get_engine),
) -> StayBookingCreatedDTO:
    try:
        return StayBookingService.weekend_gateways(engine=engine).create_booking(payload)
    except BackofficeError as e:
        raise http_error(e)


@weekend_router.get("")
def list_weekend_bookings(engine: Engine = Depends(get_engine)) -> List[Dict[str, Any]]:
    try:
        return StayBookingService.weekend_gateways(engine=engine).list_bookings()
    except BackofficeError as e:
        raise http_error(e)


@weekend_router.get("/{booking_id}")
def get_weekend_booking(
    booking_id: int,
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        return StayBookingService.weekend_gateways(engine=engine).get_booking(booking_id)
    except BackofficeError as e:
        raise http_error(e)


@weekend_router.delete("/{booking_id}")
def delete_weekend_booking(
    booking_id: int,
    engine: Engine = Depends(get_engine),
) -> Dict[str, Any]:
    try:
        StayBookingService.weekend_gateways(engine=engine).delete_booking(booking_id)
    except BackofficeError as e:
        raise http_error(e)
    return {"ok": True, "booking_id": booking_id}
