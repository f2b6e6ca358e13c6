from __future__ import annotations

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.engine import Engine

from backoffice.common.errors import BackofficeError, http_error
from backoffice.db.core import get_engine
from backoffice.tour_booking.dtos import (
    TourBookingCreateDTO,
    TourBookingCreatedDTO,
    TourBookingDTO,
)
from backoffice.tour_booking.services.tour_booking_service import TourBookingService

router = APIRouter(
    prefix="/api/bookings",
    tags=["tour_bookings"],
)


# ------------------------------------------------------------
# POST /api/bookings
# ------------------------------------------------------------

@router.post(
    "",
    response_model=TourBookingCreatedDTO,
    status_code=status.HTTP_201_CREATED,
)
def create_tour_booking(
    payload: TourBookingCreateDTO,
    engine: Engine = Depends(get_engine),
) -> TourBookingCreatedDTO:
    """
    Create a tour booking and its passengers atomically.

    Either the booking and every passenger row exist afterwards, or nothing
    does.
    """
    service = TourBookingService(engine=engine)
    try:
        return service.create_booking(payload)
    except BackofficeError as e:
        raise http_error(e)


@router.get("/customer/{customer_id}", response_model=List[TourBookingDTO])
def list_customer_bookings(
    customer_id: int,
    engine: Engine = Depends(get_engine),
) -> List[TourBookingDTO]:
    service = TourBookingService(engine=engine)
    try:
        return service.list_customer_bookings(customer_id)
    except BackofficeError as e:
        raise http_error(e)


@router.get("/{booking_id}", response_model=TourBookingDTO)
def get_tour_booking(
    booking_id: int,
    engine: Engine = Depends(get_engine),
) -> TourBookingDTO:
    service = TourBookingService(engine=engine)
    try:
        return service.get_booking(booking_id)
    except BackofficeError as e:
        raise http_error(e)
