from __future__ import annotations

import secrets
import time
from typing import List, Optional

from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import CompositePayload
from backoffice.tour_booking.dtos import (
    TourBookingCreateDTO,
    TourBookingCreatedDTO,
    TourBookingDTO,
)
from backoffice.tour_booking.repository.tour_booking_repo import TourBookingRepository

BOOKING_REF_PREFIX = "KES"


def generate_booking_ref(now_ms: Optional[int] = None) -> str:
    """
    "KES" + epoch millis + 3 random digits (always ^[A-Z]{3}\\d+$).

    The random suffix keeps two bookings in the same millisecond apart.
    """
    ms = now_ms if now_ms is not None else int(time.time() * 1000)
    return f"{BOOKING_REF_PREFIX}{ms}{secrets.randbelow(1000):03d}"


class TourBookingService:
    """
    Tour booking use cases.

    - create: booking + passengers in one transaction
    - detail / list by customer
    """

    def __init__(
        self,
        *,
        engine: Optional[Engine] = None,
        repo: Optional[TourBookingRepository] = None,
    ) -> None:
        self._repo = repo or TourBookingRepository(engine=engine)

    def create_booking(self, payload: TourBookingCreateDTO) -> TourBookingCreatedDTO:
        booking_ref = generate_booking_ref()

        composite = CompositePayload(
            parent={
                "booking_ref": booking_ref,
                "customer_id": payload.customer_id,
                "departure_id": payload.departure_id,
                "total_adult": payload.total_adult,
                "total_child": payload.total_child,
                "total_infant": payload.total_infant,
                "total_amount": payload.total_amount,
            },
            children={
                "passengers": [p.model_dump() for p in payload.passengers],
            },
        )
        result = self._repo.writer.create(composite)

        return TourBookingCreatedDTO(
            booking_id=result.parent_id,
            booking_ref=booking_ref,
            passengers=result.child_counts["passengers"],
        )

    def get_booking(self, booking_id: int) -> TourBookingDTO:
        return TourBookingDTO(**self._repo.writer.fetch(booking_id))

    def list_customer_bookings(self, customer_id: int) -> List[TourBookingDTO]:
        return [TourBookingDTO(**row) for row in self._repo.list_by_customer(customer_id)]
