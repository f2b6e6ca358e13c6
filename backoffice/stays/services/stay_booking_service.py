from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel
from sqlalchemy.engine import Engine

from backoffice.composite.composite_writer import CompositePayload
from backoffice.stays.dtos import StayBookingCreatedDTO
from backoffice.stays.repository.stay_booking_repo import (
    BUNGALOW_BOOKING_SPEC,
    WEEKEND_BOOKING_SPEC,
    StayBookingRepository,
)


class StayBookingService:
    """
    Bungalow / weekend gateway enquiries.

    Responsibilities:
      - booking row + guest rows in one transaction
      - list (with guests), detail, delete (guests first)

    The guest collection name is "guests" for bungalows and "children" for
    weekend gateways; this service only sees it through the repository spec.
    """

    def __init__(self, repo: StayBookingRepository) -> None:
        self._repo = repo
        self._child = repo.spec.children[0].name

    @classmethod
    def bungalows(cls, *, engine: Optional[Engine] = None) -> "StayBookingService":
        return cls(StayBookingRepository(BUNGALOW_BOOKING_SPEC, engine=engine))

    @classmethod
    def weekend_gateways(cls, *, engine: Optional[Engine] = None) -> "StayBookingService":
        return cls(StayBookingRepository(WEEKEND_BOOKING_SPEC, engine=engine))

    def create_booking(self, payload: BaseModel) -> StayBookingCreatedDTO:
        data = payload.model_dump(exclude_none=True)
        guests = data.pop(self._child, [])

        result = self._repo.writer.create(
            CompositePayload(parent=data, children={self._child: guests})
        )
        return StayBookingCreatedDTO(
            booking_id=result.parent_id,
            guests=result.child_counts[self._child],
        )

    def get_booking(self, booking_id: int) -> Dict[str, Any]:
        data = self._repo.writer.fetch(booking_id)
        guests = data.pop(self._child)
        return {"booking": data, self._child: guests}

    def list_bookings(self) -> List[Dict[str, Any]]:
        return self._repo.list_with_guests()

    def delete_booking(self, booking_id: int) -> None:
        self._repo.writer.delete(booking_id)
